"""Commandline interaction with SGE cluster schedulers.
"""
import re

from trimstar.provenance import do

_jobid_pat = re.compile(r'Your job (?P<jobid>\d+) \("')

def submit_job(scheduler_args, script, name, log_file, queue=None, cores=1):
    """Submit a job script to the scheduler, returning the result and job ID.

    qsub copies the script at submission, so it can be removed afterwards.
    Parallel environment names are site specific, so `cores` only applies
    through a `-pe` entry in `scheduler_args`.
    """
    cl = ["qsub", "-cwd", "-V", "-j", "y", "-N", name, "-o", log_file]
    if queue:
        cl += ["-q", queue]
    cl += scheduler_args + [script]
    result = do.run(cl, "Submitting %s to SGE" % name)
    match = _jobid_pat.search(result.stdout)
    return result, (match.group("jobid") if match else None)
