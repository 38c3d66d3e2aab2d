"""Commandline interaction with LSF schedulers.
"""
import re

from trimstar.provenance import do

_jobid_pat = re.compile(r"Job <(?P<jobid>\d+)> is")

def submit_job(scheduler_args, script, name, log_file, queue=None, cores=1):
    """Submit a job script to the scheduler, returning the result and job ID.

    The script is passed on standard input so bsub spools its content.
    """
    cl = ["bsub", "-J", name, "-o", log_file, "-n", cores]
    if queue:
        cl += ["-q", queue]
    cl += scheduler_args
    with open(script) as in_handle:
        result = do.run(cl, "Submitting %s to LSF" % name, stdin_input=in_handle.read())
    match = _jobid_pat.search(result.stdout)
    return result, (match.group("jobid") if match else None)
