"""Run samples sequentially on the local machine.
"""
from trimstar import utils
from trimstar.distributed import prun, tracker
from trimstar.errors import SampleProcessingError
from trimstar.fastq import trim
from trimstar.log import logger
from trimstar.ngsalign import star
from trimstar.provenance import do


class LocalRunner(object):
    """Trim then align each sample as foreground child processes.
    """
    wait_for_jobs = False

    def __init__(self, config, dirs, suffix):
        self.config = config
        self.dirs = dirs
        self.suffix = suffix
        self.trim_cl = trim.trimmomatic_cl(config)
        self.star_path = star.star_cl(config)

    def dispatch(self, sample):
        record = tracker.JobRecord(sample.name, star.marker_file(self.dirs, sample.name))
        utils.remove_safe(record.marker)
        utils.safe_makedir(star.sample_align_dir(self.dirs, sample.name))
        tracker.record_job(self.dirs.index_file, record)
        logger.info("Processing %s locally" % sample.name)
        for step, cmd in prun.sample_commands(sample, self.config, self.dirs, self.suffix,
                                              self.trim_cl, self.star_path):
            result = do.run(cmd, "Running %s" % step, sample=sample.name)
            if not result.ok:
                raise SampleProcessingError(sample.name, step, result)
        return record
