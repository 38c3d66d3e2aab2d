"""Main entry point for trimming and aligning a directory of RNA-seq samples.

Handles running the full pipeline based on a prepared run configuration.
"""
import os

from trimstar import utils
from trimstar.distributed import prun, tracker
from trimstar.errors import JobSubmissionError, PollTimeoutError, RunLockedError, SampleProcessingError
from trimstar.log import logger
from trimstar.ngsalign import star
from trimstar.pipeline import genome, samples, summary

LOCK_FILE = ".trimstar.lock"


def run_main(config):
    """Trim and align all samples in the input directory.

    Returns the `RunSummary` for the run. Sample level failures are recorded
    in the summary; fatal errors propagate. The output directory lock is held
    from before the genome directory is touched until the summary is written.
    """
    suffix, sample_set = samples.discover(config.input_dir, config.layout)
    out_dir = genome.make_out_dir(config)
    with utils.simple_lock(os.path.join(out_dir, LOCK_FILE), RunLockedError):
        dirs = genome.prepare(config)
        index_rebuilt = star.index(config, dirs, star.star_cl(config))
        runner = prun.get_runner(config, dirs, suffix)
        records, failed = _dispatch_samples(runner, sample_set)
        attempted = [s.name for s in sample_set]
        if runner.wait_for_jobs and records:
            try:
                tracker.wait_for_completion([r.marker for r in records],
                                            config.poll_interval, config.max_wait)
            except PollTimeoutError:
                summary.write_summary(dirs, summary.summarize(config.mode, attempted, failed,
                                                              records, index_rebuilt))
                raise
        run_summary = summary.summarize(config.mode, attempted, failed, records, index_rebuilt)
        summary.write_summary(dirs, run_summary)
    return run_summary

def _dispatch_samples(runner, sample_set):
    """Hand each sample to the runner, continuing past sample level failures.
    """
    records = []
    failed = {}
    for sample in sample_set:
        try:
            records.append(runner.dispatch(sample))
        except (SampleProcessingError, JobSubmissionError) as e:
            logger.error("Could not process %s, continuing with remaining samples" % sample.name)
            failed[sample.name] = str(e)
    return records, failed
