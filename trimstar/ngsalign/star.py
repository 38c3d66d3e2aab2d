"""Genome indexing and two-pass RNA-seq alignment with STAR.

https://github.com/alexdobin/STAR
"""
import os

from trimstar import utils
from trimstar.distributed.transaction import tx_tmpdir, move_tmp_file
from trimstar.errors import IndexBuildError
from trimstar.fastq import trim
from trimstar.log import logger
from trimstar.pipeline import config_utils
from trimstar.pipeline.config_utils import Layout
from trimstar.provenance import do

INDEX_FILES = ["Genome", "SA", "genomeParameters.txt"]
# everything genomeGenerate writes into the genome directory
INDEX_PRODUCTS = INDEX_FILES + ["SAindex", "chrName.txt", "chrNameLength.txt", "chrStart.txt",
                                "chrLength.txt", "exonInfo.tab", "transcriptInfo.tab",
                                "geneInfo.tab", "exonGeTrInfo.tab", "sjdbInfo.txt",
                                "sjdbList.fromGTF.out.tab", "sjdbList.out.tab", "Log.out"]
PARAMS_FILE = "genomeParameters.txt"
FINAL_LOG = "Log.final.out"
RUN_SEED = 777


def star_cl(config, check=True):
    return config_utils.get_program("STAR", config, check=check)

def marker_file(dirs, sample_name):
    """Completion marker STAR writes once a sample alignment finished.
    """
    return os.path.join(sample_align_dir(dirs, sample_name), FINAL_LOG)

def sample_align_dir(dirs, sample_name):
    return os.path.join(dirs.align, sample_name)

def recorded_reference(genome_dir):
    """Reference fasta recorded by STAR in the index parameters, if any.
    """
    params_file = os.path.join(genome_dir, PARAMS_FILE)
    if not os.path.exists(params_file):
        return None
    with open(params_file) as in_handle:
        for line in in_handle:
            parts = line.split()
            if len(parts) > 1 and parts[0] == "genomeFastaFiles":
                return parts[1]
    return None

def index_is_current(genome_dir, ref_file):
    if not all(utils.file_exists(os.path.join(genome_dir, x)) for x in INDEX_FILES):
        return False
    recorded = recorded_reference(genome_dir)
    return recorded is not None and os.path.abspath(recorded) == os.path.abspath(ref_file)

def _remove_index(genome_dir, keep=()):
    """Remove files from a previous index build, keeping the linked genome files.
    """
    for fname in [x for x in INDEX_PRODUCTS if x not in keep]:
        utils.remove_safe(os.path.join(genome_dir, fname))

def index(config, dirs, star_path):
    """Create a STAR index in the genome directory unless a current one exists.

    Returns True when an index was built.
    """
    if index_is_current(dirs.genome, config.ref_file):
        logger.info("Reusing STAR index in %s built from %s" % (dirs.genome, config.ref_file))
        return False
    recorded = recorded_reference(dirs.genome)
    if recorded:
        logger.info("STAR index in %s was built from %s, rebuilding for %s" %
                    (dirs.genome, recorded, config.ref_file))
    with tx_tmpdir(dirs.out) as tx_out_dir:
        tx_index_dir = utils.safe_makedir(os.path.join(tx_out_dir, "index"))
        cmd = [star_path, "--runMode", "genomeGenerate",
               "--runThreadN", config.cores,
               "--genomeDir", tx_index_dir,
               "--genomeFastaFiles", config.ref_file,
               "--sjdbGTFfile", config.gtf_file,
               "--outFileNamePrefix", os.path.join(tx_out_dir, "")]
        cmd += [str(x) for x in config_utils.get_resources("star", config).get("index_options", [])]
        result = do.run(cmd, "Index STAR")
        if not result.ok:
            raise IndexBuildError(result)
        _remove_index(dirs.genome, [os.path.basename(f) for f in [config.ref_file, config.gtf_file]])
        for fname in os.listdir(tx_index_dir):
            move_tmp_file(os.path.join(tx_index_dir, fname), os.path.join(dirs.genome, fname))
    logger.info("Built STAR index in %s" % dirs.genome)
    return True

def align_cmd(sample, layout, suffix, dirs, config, star_path):
    """Two-pass STAR alignment of the trimmed reads, excluding orphans.
    """
    paired, _ = trim.trimmed_files(sample, dirs, suffix)
    expected = 2 if layout == Layout.PAIRED else 1
    assert len(paired) == expected, (sample, layout)
    cmd = [star_path, "--runMode", "alignReads",
           "--twopassMode", "Basic",
           "--runThreadN", config.cores,
           "--genomeDir", dirs.genome,
           "--readFilesIn"] + paired
    if suffix.is_compressed:
        cmd += ["--readFilesCommand", "gunzip", "-c"]
    cmd += ["--runRNGseed", RUN_SEED,
            "--outFileNamePrefix", os.path.join(sample_align_dir(dirs, sample.name), ""),
            "--outSAMtype", "BAM", "Unsorted", "SortedByCoordinate",
            "--quantMode", "TranscriptomeSAM", "GeneCounts"]
    cmd += config_utils.get_resources("star", config).get("options", [])
    return [str(x) for x in cmd]
