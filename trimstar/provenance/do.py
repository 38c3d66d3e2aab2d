"""Centralize running of external commands, providing logging and tracking.

Commands never raise on failure. Each invocation returns a `CommandResult`
and callers decide what a non-zero exit means for them.
"""
import collections
import subprocess

from trimstar.log import logger, logger_cl, logger_stdout

COMMAND_NOT_FOUND = 127


class CommandResult(collections.namedtuple("CommandResult",
                                           ["cmd", "returncode", "stdout", "stderr"])):
    __slots__ = ()

    @property
    def ok(self):
        return self.returncode == 0

    @property
    def not_found(self):
        return self.returncode == COMMAND_NOT_FOUND

    @property
    def cmd_str(self):
        return " ".join(str(x) for x in self.cmd)


def run(cmd, descr=None, sample=None, stdin_input=None, log_stdout=False):
    """Run the provided command, logging details and capturing output.
    """
    cmd = [str(x) for x in cmd]
    if descr:
        logger.debug(_descr_str(descr, sample))
    logger_cl.debug(" ".join(cmd))
    result = _do_run(cmd, stdin_input)
    for line in result.stdout.splitlines():
        if line.rstrip():
            if log_stdout:
                logger_stdout.debug(line.rstrip())
            else:
                logger.debug(line.rstrip())
    if result.not_found:
        logger.error("Command not found: %s" % cmd[0])
    elif not result.ok:
        logger.error("%s failed with exit code %s" % (descr or cmd[0], result.returncode))
        logger.error("CMD: %s" % result.cmd_str)
        if result.stderr:
            logger.error("STDERR:\n%s" % result.stderr.rstrip())
    return result

def _descr_str(descr, sample):
    """Add the sample being processed to the description string.
    """
    if sample:
        descr = "{0} : {1}".format(descr, sample)
    return descr

def _do_run(cmd, stdin_input=None):
    """Perform running, collecting exit status and both output streams.
    """
    try:
        s = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE if stdin_input is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            close_fds=True,
        )
    except FileNotFoundError as e:
        return CommandResult(tuple(cmd), COMMAND_NOT_FOUND, "", str(e))
    except PermissionError as e:
        return CommandResult(tuple(cmd), 126, "", str(e))
    stdout, stderr = s.communicate(stdin_input.encode("utf-8") if stdin_input is not None else None)
    return CommandResult(tuple(cmd), s.returncode,
                         stdout.decode("utf-8", errors="replace"),
                         stderr.decode("utf-8", errors="replace"))
