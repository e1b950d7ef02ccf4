"""Recursive copy of one source tree into a single destination."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Iterable

from ..core.errors import CopyError, CopyErrorKind

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


def _scan(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as entries:
            return list(entries)
    except OSError as exc:
        raise CopyError(CopyErrorKind.SOURCE_UNREADABLE, directory, exc) from exc


def _make_dir(path: Path, mode: int) -> None:
    """Create a destination directory with the source permission bits.

    The process umask still applies. An existing directory keeps its mode.
    """
    try:
        os.makedirs(path, mode=mode, exist_ok=True)
    except OSError as exc:
        raise CopyError(CopyErrorKind.DESTINATION_WRITE_FAILED, path, exc) from exc


def _copy_file(src: Path, dst: Path) -> None:
    try:
        fsrc = open(src, "rb")
    except OSError as exc:
        raise CopyError(CopyErrorKind.SOURCE_UNREADABLE, src, exc) from exc

    with fsrc:
        try:
            fdst = open(dst, "wb")
        except OSError as exc:
            raise CopyError(
                CopyErrorKind.DESTINATION_WRITE_FAILED, dst, exc
            ) from exc
        try:
            with fdst:
                shutil.copyfileobj(fsrc, fdst, _CHUNK_SIZE)
        except OSError as exc:
            raise CopyError(CopyErrorKind.IO_FAILURE, dst, exc) from exc


def _copy_symlink(src: Path, dst: Path) -> None:
    """Recreate a symlink verbatim; the link target is never followed."""
    try:
        link_target = os.readlink(src)
    except OSError as exc:
        raise CopyError(CopyErrorKind.SOURCE_UNREADABLE, src, exc) from exc

    try:
        if os.path.islink(dst) or os.path.isfile(dst):
            os.unlink(dst)
        os.symlink(link_target, dst)
    except OSError as exc:
        raise CopyError(CopyErrorKind.DESTINATION_WRITE_FAILED, dst, exc) from exc


def copy_tree(
    source: Path | str,
    destination: Path | str,
    *,
    skip: Iterable[Path | str] = (),
) -> None:
    """Replicate the directory tree at ``source`` under ``destination``.

    Directories are created before their children. Regular files are
    truncated and rewritten with the source bytes, without metadata.
    Symlinks are recreated as links. Any other entry type is rejected.

    Content already present at ``destination`` is merged into, never
    cleared, so files absent from the source survive the copy.

    The walk stops at the first failure and nothing written so far is
    rolled back. A destination that resolves to the source itself is
    refused before anything is opened.

    Failures name the offending path: the source entry for
    ``SOURCE_UNREADABLE``, the destination entry for
    ``DESTINATION_WRITE_FAILED``, and the destination file for an
    ``IO_FAILURE`` raised while streaming bytes, whichever side failed.

    Args:
        source: Directory to copy
        destination: Root directory to copy into
        skip: Directories never descended into, such as sibling
            destinations nested inside the source

    Raises:
        CopyError: On the first entry that cannot be read or written
    """
    source = Path(source)
    destination = Path(destination)

    try:
        root_stat = source.stat()
    except OSError as exc:
        raise CopyError(CopyErrorKind.SOURCE_UNREADABLE, source, exc) from exc
    if not stat.S_ISDIR(root_stat.st_mode):
        raise CopyError(
            CopyErrorKind.SOURCE_UNREADABLE,
            source,
            NotADirectoryError(f"Not a directory: {source}"),
        )

    destination_real = os.path.realpath(destination)
    if destination_real == os.path.realpath(source):
        raise CopyError(
            CopyErrorKind.DESTINATION_WRITE_FAILED,
            destination,
            ValueError(f"Destination is the source directory: {source}"),
        )

    skipped = {os.path.realpath(p) for p in skip}
    skipped.add(destination_real)

    _make_dir(destination, stat.S_IMODE(root_stat.st_mode))

    files_copied = 0
    pending: list[Path] = [Path(".")]
    while pending:
        rel_dir = pending.pop()
        for entry in _scan(source / rel_dir):
            rel_path = rel_dir / entry.name
            src_path = Path(entry.path)
            dst_path = destination / rel_path

            try:
                entry_stat = entry.stat(follow_symlinks=False)
            except OSError as exc:
                raise CopyError(
                    CopyErrorKind.SOURCE_UNREADABLE, src_path, exc
                ) from exc
            mode = entry_stat.st_mode

            if stat.S_ISLNK(mode):
                _copy_symlink(src_path, dst_path)
            elif stat.S_ISDIR(mode):
                if os.path.realpath(src_path) in skipped:
                    logger.debug(f"Skipping nested destination: {src_path}")
                    continue
                _make_dir(dst_path, stat.S_IMODE(mode))
                pending.append(rel_path)
            elif stat.S_ISREG(mode):
                _copy_file(src_path, dst_path)
                files_copied += 1
            else:
                raise CopyError(
                    CopyErrorKind.IO_FAILURE,
                    src_path,
                    OSError(f"unsupported file type: {src_path}"),
                )

    logger.debug(f"Copied {files_copied} file(s) from {source} to {destination}")
