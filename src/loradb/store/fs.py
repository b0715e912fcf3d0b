"""
Filesystem helpers for loradb.store.

Responsibilities
- Provide a minimal stdlib-only abstraction for the filesystem operations the
  store uses: directory creation, safe write handles, fsync, atomic renames and
  cleanup of superseded files.
- Establish clear semantics for the atomic write path: tmp write → fsync → atomic rename.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem.
- All helpers are synchronous. file_lock serializes ParquetStore calls on one
  table across handles and processes (POSIX flock).
"""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO


def makedirs(path: str, exist_ok: bool = True) -> None:
    """
    Create directories recursively.

    Args:
        path (str): Directory path to create.
        exist_ok (bool): Do not error if the directory already exists.
    """
    os.makedirs(path, exist_ok=exist_ok)


@contextmanager
def open_write(path: str) -> Iterator[BinaryIO]:
    """
    Open a file for binary write; flush and fsync before closing.

    Args:
        path (str): Destination path to open in write-binary mode.

    Yields:
        BinaryIO: A writable file handle.

    Notes:
        Caller is responsible for the atomic os.replace of the temporary file to
        its final path.
    """
    fh = open(path, "wb")
    try:
        yield fh
        fh.flush()
        os.fsync(fh.fileno())
    finally:
        fh.close()


def fsync_path(path: str) -> None:
    """
    Open a path read-only and fsync its file descriptor.

    Notes:
        Used after pyarrow wrote a part directly to a path, before the rename.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def rename_atomic(src: str, dst: str) -> None:
    """
    Atomically rename src -> dst on the same filesystem.

    Notes:
        Uses os.replace, which is atomic only if src and dst reside on the same filesystem.
    """
    os.replace(src, dst)


def remove_if_exists(path: str) -> bool:
    """Remove a file; return False if it was already gone."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True


def listdir(path: str) -> list[str]:
    """
    List entry names in a directory (non-recursive), sorted.

    Returns:
        list[str]: Entry names; [] if the directory does not exist.
    """
    try:
        return sorted(os.listdir(path))
    except FileNotFoundError:
        return []


@contextmanager
def file_lock(path: str, shared: bool = False) -> Iterator[None]:
    """
    Hold an flock on ``path`` (created if missing) for the duration of the block.

    Args:
        path (str): Lock file path.
        shared (bool): Take a shared lock instead of an exclusive one.

    Notes:
        Blocks until the lock is granted. Locks belong to the open file
        description, so two handles in one process exclude each other too.
        The lock file is never removed.
    """
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        fcntl.flock(fd, fcntl.LOCK_SH if shared else fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)
