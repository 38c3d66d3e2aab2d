"""Helpful utilities for building analysis pipelines.
"""
import contextlib
import errno
import os
import shutil
import socket
import time


def safe_makedir(dname):
    """Make a directory if it doesn't exist, handling concurrent race conditions.
    """
    if not dname:
        return dname
    num_tries = 0
    max_tries = 5
    while not os.path.exists(dname):
        # we could get an error here if multiple processes are creating
        # the directory at the same time. Grr, concurrency.
        try:
            os.makedirs(dname)
        except OSError:
            if num_tries > max_tries:
                raise
            num_tries += 1
            time.sleep(2)
    if not os.path.isdir(dname):
        raise OSError(errno.ENOTDIR, "Not a directory", dname)
    return dname

def file_exists(fname):
    """Check if a file exists and is non-empty.
    """
    try:
        return bool(fname) and os.path.exists(fname) and os.path.getsize(fname) > 0
    except OSError:
        return False

def remove_safe(f):
    try:
        if os.path.isdir(f):
            shutil.rmtree(f)
        else:
            os.remove(f)
    except OSError:
        pass

def get_abspath(path, pardir=None):
    if pardir is None:
        pardir = os.getcwd()
    path = os.path.expandvars(os.path.expanduser(path))
    return os.path.normpath(os.path.join(pardir, path))

def hardlink_plus(orig, new):
    """Hard link a file into a new location, keeping an existing identical link.

    Replaces a stale file at the destination. Falls back to an absolute symlink
    when the two locations are on different devices.
    """
    orig = os.path.abspath(orig)
    if not os.path.exists(orig):
        raise OSError(errno.ENOENT, "File not found", orig)
    if os.path.lexists(new):
        if os.path.exists(new) and os.path.samefile(orig, new):
            return new
        remove_safe(new)
    try:
        os.link(orig, new)
    except OSError as e:
        if e.errno not in (errno.EXDEV, errno.EPERM):
            raise
        os.symlink(orig, new)
    return new

@contextlib.contextmanager
def simple_lock(lock_file, error_cls=FileExistsError):
    """Exclusive lock file held for the life of the context.

    Stale locks are never cleared automatically; a lock file left by a
    crashed run has to be removed by hand.
    """
    try:
        fd = os.open(lock_file, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        raise error_cls(lock_file)
    with os.fdopen(fd, "w") as out_handle:
        out_handle.write("%s:%s\n" % (socket.gethostname(), os.getpid()))
    try:
        yield lock_file
    finally:
        remove_safe(lock_file)
