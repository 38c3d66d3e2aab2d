"""Failures raised while running the pipeline.

Fatal errors abort the whole run. Sample level errors are recorded against the
sample and processing continues with the remaining samples.
"""


class PipelineError(Exception):
    fatal = True


class CmdNotFound(PipelineError):
    pass


class NoInputFilesError(PipelineError):
    pass


class RunLockedError(PipelineError):

    def __init__(self, lock_file):
        self.lock_file = lock_file
        super(RunLockedError, self).__init__(
            "Another run holds the lock on this output directory: %s\n"
            "Remove the lock file if no other run is active." % lock_file)


class DirectoryCreationError(PipelineError):

    def __init__(self, path, reason=None):
        self.path = path
        msg = "Could not create %s" % path
        if reason:
            msg += ": %s" % reason
        super(DirectoryCreationError, self).__init__(msg)


class IndexBuildError(PipelineError):

    def __init__(self, result):
        self.result = result
        super(IndexBuildError, self).__init__(
            "STAR index build failed with exit code %s\n%s" % (result.returncode, result.stderr))


class SampleProcessingError(PipelineError):
    """Trimming or alignment failed for a single sample in local mode.
    """
    fatal = False

    def __init__(self, sample, step, result):
        self.sample = sample
        self.step = step
        self.result = result
        super(SampleProcessingError, self).__init__(
            "%s failed for %s with exit code %s\n%s" % (step, sample, result.returncode, result.stderr))


class JobSubmissionError(PipelineError):
    """The batch queue refused the job for a single sample.
    """
    fatal = False

    def __init__(self, sample, result):
        self.sample = sample
        self.result = result
        super(JobSubmissionError, self).__init__(
            "Job submission failed for %s with exit code %s\n%s" % (sample, result.returncode, result.stderr))


class PollTimeoutError(PipelineError):
    """Cluster jobs did not produce their completion markers in time.
    """

    def __init__(self, incomplete, waited):
        self.incomplete = list(incomplete)
        self.waited = waited
        super(PollTimeoutError, self).__init__(
            "Gave up after %ss waiting on %s incomplete jobs:\n%s"
            % (waited, len(self.incomplete), "\n".join(self.incomplete)))
