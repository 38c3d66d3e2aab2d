"""Submit samples as self-contained job scripts to a batch queue.

Submission returns as soon as the scheduler accepts a job; completion is only
observed through the marker files listed in the completion index.
"""
import os
import shlex
import stat

from trimstar import utils
from trimstar.distributed import lsf, prun, sge, slurm, tracker
from trimstar.errors import JobSubmissionError
from trimstar.fastq import trim
from trimstar.log import logger
from trimstar.ngsalign import star
from trimstar.pipeline import config_utils

_SCHEDULERS = {"sge": sge, "lsf": lsf, "slurm": slurm}


def job_script(commands, work_dir):
    """Bash script running each command in order, stopping at the first failure.
    """
    lines = ["#!/bin/bash", "set -euo pipefail", "mkdir -p %s" % shlex.quote(work_dir)]
    for step, cmd in commands:
        lines.append("# %s" % step)
        lines.append(" ".join(shlex.quote(x) for x in cmd))
    return "\n".join(lines) + "\n"


class ClusterRunner(object):
    """Submit one trim and align job per sample to the configured scheduler.
    """
    wait_for_jobs = True

    def __init__(self, config, dirs, suffix):
        self.config = config
        self.dirs = dirs
        self.suffix = suffix
        # programs resolve on the cluster nodes, not the submit host
        self.trim_cl = trim.trimmomatic_cl(config, check=False)
        self.star_path = star.star_cl(config, check=False)
        self.scheduler = _SCHEDULERS[config.scheduler]
        self.scheduler_args = [str(x) for x in
                               config_utils.get_resources(config.scheduler, config).get("args", [])]

    def write_script(self, sample):
        work_dir = star.sample_align_dir(self.dirs, sample.name)
        commands = prun.sample_commands(sample, self.config, self.dirs, self.suffix,
                                        self.trim_cl, self.star_path)
        script = os.path.join(self.dirs.align, "%s.job.sh" % sample.name)
        with open(script, "w") as out_handle:
            out_handle.write(job_script(commands, work_dir))
        os.chmod(script, os.stat(script).st_mode | stat.S_IXUSR | stat.S_IXGRP)
        return script

    def dispatch(self, sample):
        record = tracker.JobRecord(sample.name, star.marker_file(self.dirs, sample.name))
        utils.remove_safe(record.marker)
        work_dir = utils.safe_makedir(star.sample_align_dir(self.dirs, sample.name))
        script = self.write_script(sample)
        result, jobid = self.scheduler.submit_job(
            self.scheduler_args, script, "trimstar_%s" % sample.name,
            os.path.join(work_dir, "%s.job.log" % sample.name),
            queue=self.config.queue, cores=self.config.cores)
        if not result.ok:
            logger.error("Keeping job script for inspection: %s" % script)
            raise JobSubmissionError(sample.name, result)
        tracker.record_job(self.dirs.index_file, record)
        utils.remove_safe(script)
        logger.info("Submitted %s to %s as job %s" % (sample.name, self.config.scheduler, jobid))
        return record
