"""Handle file based transactions allowing safe restarts at any point.

Outputs are written to temporary locations during processing and moved to
their final location when finished, so an interrupted step never leaves a
half-written file where a finished one is expected.
"""
import contextlib
import os
import shutil
import tempfile

from trimstar import utils

DEFAULT_TMP = "trimstartx"


@contextlib.contextmanager
def tx_tmpdir(base_dir=None, remove=True):
    """Context manager to create and remove a transactional temporary directory.

    Uses a `trimstartx` directory inside `base_dir`, or the current directory,
    so results move to their final location on the same filesystem.
    """
    base_dir = base_dir or os.getcwd()
    tmpdir_base = utils.safe_makedir(os.path.join(base_dir, DEFAULT_TMP))
    tmp_dir = tempfile.mkdtemp(dir=tmpdir_base)
    try:
        yield tmp_dir
    finally:
        if remove:
            utils.remove_safe(tmp_dir)
            if os.path.isdir(tmpdir_base) and not os.listdir(tmpdir_base):
                utils.remove_safe(tmpdir_base)


@contextlib.contextmanager
def file_transaction(*files):
    """Wrap file generation in a transaction, moving to output if finishes.
    """
    orig_names = [f for f in files if f]
    base_dir = os.path.dirname(os.path.abspath(orig_names[0]))
    with tx_tmpdir(base_dir) as tmpdir:
        safe_names = [os.path.join(tmpdir, os.path.basename(f)) for f in orig_names]
        if len(safe_names) == 1:
            yield safe_names[0]
        else:
            yield tuple(safe_names)
        for safe, orig in zip(safe_names, orig_names):
            if os.path.exists(safe):
                move_tmp_file(safe, orig)


def move_tmp_file(safe, orig):
    """Move a finished temporary file or directory into place, replacing any older copy.
    """
    utils.safe_makedir(os.path.dirname(orig))
    if os.path.isdir(orig) and os.path.isdir(safe):
        utils.remove_safe(orig)
    shutil.move(safe, orig)
