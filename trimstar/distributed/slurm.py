"""Commandline interaction with SLURM schedulers.
"""
import re

from trimstar.provenance import do

_jobid_pat = re.compile(r"Submitted batch job (?P<jobid>\d+)")

def submit_job(scheduler_args, script, name, log_file, queue=None, cores=1):
    """Submit a job script to the scheduler, returning the result and job ID.
    """
    cl = ["sbatch", "--job-name", name, "--output", log_file, "--cpus-per-task", cores]
    if queue:
        cl += ["--partition", queue]
    cl += scheduler_args + [script]
    result = do.run(cl, "Submitting %s to SLURM" % name)
    match = _jobid_pat.search(result.stdout)
    return result, (match.group("jobid") if match else None)
