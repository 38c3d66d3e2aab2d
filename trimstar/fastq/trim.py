"""Adapter clipping and quality trimming of raw reads with Trimmomatic.

http://www.usadellab.org/cms/?page=trimmomatic
"""
import os

from trimstar import utils
from trimstar.errors import CmdNotFound
from trimstar.pipeline import config_utils
from trimstar.pipeline.config_utils import Layout

TRIM_DEFAULTS = {"phred": "phred33",
                 "illuminaclip": "2:30:10",
                 "slidingwindow": "4:15",
                 "avgqual": 20,
                 "minlen": 36}


def trimmed_files(sample, dirs, suffix):
    """Paired and orphaned trimmed outputs for a sample.

    Single-end samples have one trimmed output and no orphans.
    """
    ext = ".gz" if suffix.is_compressed else ""
    reads = ["1"] if len(sample.files) == 1 else ["1", "2"]
    paired = [os.path.join(dirs.trimmed, "%s_%s_trim%s" % (sample.name, r, ext)) for r in reads]
    orphaned = ([os.path.join(dirs.trimmed, "%s_%s_trim_orph%s" % (sample.name, r, ext)) for r in reads]
                if len(reads) > 1 else [])
    return paired, orphaned

def _get_jar(config, check=True):
    resources = config_utils.get_resources("trimmomatic", config)
    version = config.trim_version
    jar = resources.get("jar")
    if not jar:
        base_dir = resources.get("dir", "")
        jar = os.path.join(base_dir, "Trimmomatic-%s" % version, "trimmomatic-%s.jar" % version)
    jar = utils.get_abspath(config_utils.expand_path(jar))
    if check and not os.path.exists(jar):
        raise CmdNotFound("Trimmomatic %s jar not found: %s" % (version, jar))
    return jar

def trimmomatic_cl(config, check=True):
    """Command prefix for running Trimmomatic.

    A `cmd` in the trimmomatic resources, like the bioconda wrapper, replaces
    running the versioned jar with java.
    """
    resources = config_utils.get_resources("trimmomatic", config)
    if resources.get("cmd"):
        return [config_utils.get_program("trimmomatic", config, check=check)]
    java = config_utils.get_program("java", config, check=check)
    jvm_opts = [str(x) for x in config_utils.get_resources("java", config).get("jvm_opts", [])]
    return [java] + jvm_opts + ["-jar", _get_jar(config, check)]

def _adapter_file(layout, config):
    resources = config_utils.get_resources("trimmomatic", config)
    if resources.get("adapters"):
        return utils.get_abspath(resources["adapters"])
    mode = "PE" if layout == Layout.PAIRED else "SE"
    adapter_dir = os.path.join(os.path.dirname(_get_jar(config, check=False)), "adapters")
    return os.path.join(adapter_dir, "TruSeq3-%s.fa" % mode)

def trim_cmd(sample, layout, suffix, dirs, config, trim_cl):
    """Build the Trimmomatic command line for a single or paired sample.
    """
    expected = 2 if layout == Layout.PAIRED else 1
    assert len(sample.files) == expected, (sample, layout)
    opts = dict(TRIM_DEFAULTS)
    opts.update({k: v for k, v in config_utils.get_resources("trimmomatic", config).items()
                 if k in TRIM_DEFAULTS})
    paired, orphaned = trimmed_files(sample, dirs, suffix)
    if layout == Layout.PAIRED:
        outputs = [paired[0], orphaned[0], paired[1], orphaned[1]]
    else:
        outputs = paired
    cmd = list(trim_cl) + ["PE" if layout == Layout.PAIRED else "SE",
                           "-threads", config.cores, "-%s" % opts["phred"]]
    cmd += list(sample.files) + outputs
    cmd += ["ILLUMINACLIP:%s:%s" % (_adapter_file(layout, config), opts["illuminaclip"]),
            "SLIDINGWINDOW:%s" % opts["slidingwindow"],
            "AVGQUAL:%s" % opts["avgqual"],
            "MINLEN:%s" % opts["minlen"]]
    return [str(x) for x in cmd]
