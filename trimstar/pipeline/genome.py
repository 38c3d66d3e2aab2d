"""Prepare the output directory tree and the working genome directory.
"""
import collections
import os

from trimstar import utils
from trimstar.errors import DirectoryCreationError
from trimstar.log import logger

GENOME_DIR = "genome"
TRIM_DIR = "trimmed_files"
ALIGN_DIR = "STAR_aln"
INDEX_FILE = "index"

RunDirs = collections.namedtuple("RunDirs", ["out", "genome", "trimmed", "align", "index_file"])


def get_dirs(config):
    out_dir = config.out_dir
    align_dir = os.path.join(out_dir, ALIGN_DIR)
    return RunDirs(out=out_dir,
                   genome=os.path.join(out_dir, GENOME_DIR),
                   trimmed=os.path.join(out_dir, TRIM_DIR),
                   align=align_dir,
                   index_file=os.path.join(align_dir, INDEX_FILE))

def genome_file(dirs, orig):
    """Location of a reference or annotation file linked into the genome directory.
    """
    return os.path.join(dirs.genome, os.path.basename(orig))

def _makedir(dname):
    try:
        return utils.safe_makedir(dname)
    except OSError as e:
        raise DirectoryCreationError(dname, e.strerror or str(e))

def make_out_dir(config):
    """Create the top-level output directory, tolerating an existing one.
    """
    return _makedir(get_dirs(config).out)

def prepare(config):
    """Create output directories, link genome files and start the completion index.

    Safe to run again on an existing output directory: nothing already in place
    is removed or truncated.
    """
    dirs = get_dirs(config)
    for dname in [dirs.out, dirs.genome, dirs.trimmed, dirs.align]:
        _makedir(dname)
    for orig in [config.ref_file, config.gtf_file]:
        new = genome_file(dirs, orig)
        try:
            utils.hardlink_plus(orig, new)
        except OSError as e:
            raise DirectoryCreationError(new, e.strerror or str(e))
    try:
        with open(dirs.index_file, "a"):
            pass
    except OSError as e:
        raise DirectoryCreationError(dirs.index_file, e.strerror or str(e))
    logger.info("Prepared output directory %s" % dirs.out)
    return dirs
