"""File helpers for the upload flow."""

import os
from pathlib import Path
from typing import Union

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

PathLike = Union[str, Path]


def is_file_locked(path: PathLike) -> bool:
    """Check whether another writer holds the file.

    On POSIX the probe takes a non-blocking exclusive ``flock`` and releases
    it immediately. Without ``fcntl``, a file that cannot be opened for
    reading counts as locked.
    """
    try:
        fd = os.open(str(path), os.O_RDONLY)
    except FileNotFoundError:
        # a vanished file is not a locked file
        raise
    except OSError:
        return True

    try:
        if fcntl is None:
            return False
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            return True
        fcntl.flock(fd, fcntl.LOCK_UN)
        return False
    finally:
        os.close(fd)


def read_file(path: PathLike) -> bytes:
    """Read the whole file into memory."""
    with open(path, "rb") as f:
        return f.read()
