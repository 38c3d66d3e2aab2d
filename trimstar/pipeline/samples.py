"""Discover samples and raw read encoding from a directory of fastq files.

Samples are named by their first-of-pair file, `<name>_1.fastq[.gz]`, with
the mate in `<name>_2.fastq[.gz]` for paired libraries.
"""
import collections
import enum
import os

from trimstar.errors import NoInputFilesError
from trimstar.log import logger
from trimstar.pipeline.config_utils import Layout

PAIR_TOKENS = ("_1", "_2")


class RawFileSuffix(enum.Enum):
    PLAIN_FASTQ = ".fastq"
    COMPRESSED_FASTQ = ".fastq.gz"

    @property
    def is_compressed(self):
        return self is RawFileSuffix.COMPRESSED_FASTQ


Sample = collections.namedtuple("Sample", ["name", "files"])


def _list_files(input_dir):
    try:
        return sorted(f for f in os.listdir(input_dir)
                      if os.path.isfile(os.path.join(input_dir, f)))
    except OSError as e:
        raise NoInputFilesError("Could not read input directory %s: %s" % (input_dir, e))

def _suffix_of(fname):
    # compressed first, `x.fastq.gz` never ends with `.fastq`
    for suffix in (RawFileSuffix.COMPRESSED_FASTQ, RawFileSuffix.PLAIN_FASTQ):
        if fname.endswith(suffix.value):
            return suffix
    return None

def detect_suffix(input_dir):
    """Raw read encoding of the first fastq file in sorted directory order.
    """
    for fname in _list_files(input_dir):
        suffix = _suffix_of(fname)
        if suffix is not None:
            return suffix
    raise NoInputFilesError("No *%s or *%s files found in %s" %
                            (RawFileSuffix.PLAIN_FASTQ.value, RawFileSuffix.COMPRESSED_FASTQ.value,
                             input_dir))

def discover(input_dir, layout):
    """Retrieve the raw file suffix and sorted samples from an input directory.
    """
    suffix = detect_suffix(input_dir)
    fnames = _list_files(input_dir)
    first_end = PAIR_TOKENS[0] + suffix.value
    names = sorted(set(f[:-len(first_end)] for f in fnames
                       if f.endswith(first_end) and len(f) > len(first_end)))
    samples = []
    for name in names:
        files = [os.path.join(input_dir, name + PAIR_TOKENS[0] + suffix.value)]
        if layout == Layout.PAIRED:
            mate = os.path.join(input_dir, name + PAIR_TOKENS[1] + suffix.value)
            if not os.path.exists(mate):
                logger.warning("Skipping %s: missing second read file %s" % (name, mate))
                continue
            files.append(mate)
        samples.append(Sample(name, tuple(files)))
    if not samples:
        raise NoInputFilesError("No %s first-of-pair files (*%s) found in %s" %
                                (layout.value, first_end, input_dir))
    logger.info("Found %s %s-end samples with %s input in %s" %
                (len(samples), layout.value, suffix.value, input_dir))
    return suffix, samples
