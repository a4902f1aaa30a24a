# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Atomic filesystem writes for boxvault.

Both the manifest and the published box must be either fully written or not
written at all. A truncated box advertised by a manifest is worse than no box.

Atomic writes work by writing to a temporary file in the same directory as
the target, then renaming. Rename on the same filesystem is atomic on POSIX.
If the process crashes mid-write, you get a leftover temp file instead of a
corrupted target file.
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable, TypeVar

_TEMP_PREFIX = ".boxvault_tmp_"
_TEMP_SUFFIX = ".tmp"

T = TypeVar("T")


def _target_mode(target_path: Path) -> int:
    """
    Permission bits the finished file should carry: those of the file being
    replaced, or 0666 minus the umask for a new file, as `open()` would give.
    """
    try:
        return stat.S_IMODE(target_path.stat().st_mode)
    except FileNotFoundError:
        pass
    # The umask can only be read by setting it.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _write_atomically(target_path: Path, write: Callable[[BinaryIO], T]) -> T:
    """
    Create a temp file next to `target_path`, let `write` fill it, then
    rename it over the target. The temp file is removed on any failure.
    Returns whatever `write` returned.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False because the file has to survive closing so we can rename it.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="wb",
        dir=str(target_path.parent),
        prefix=_TEMP_PREFIX,
        suffix=_TEMP_SUFFIX,
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        result = write(temp_fd)
        temp_fd.flush()
        os.fsync(temp_fd.fileno())
        temp_fd.close()
        # NamedTemporaryFile creates 0600, which would survive the rename.
        os.chmod(temp_path, _target_mode(target_path))
        temp_path.replace(target_path)
        return result
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to a file atomically.

    Raises:
        OSError: If the write or rename fails. The target is left untouched.
    """
    atomic_write_bytes(target_path, content.encode(encoding))


def atomic_write_bytes(target_path: Path, data: bytes) -> None:
    """
    Write binary data to a file atomically. Same approach as atomic_write.

    Raises:
        OSError: If the write or rename fails.
    """
    _write_atomically(target_path, lambda out: out.write(data))


def atomic_copy_stream(
    target_path: Path,
    source: BinaryIO,
    copy: Callable[[BinaryIO, Callable[[bytes], object]], T],
) -> T:
    """
    Stream `source` into `target_path` atomically.

    `copy` receives the source and a chunk sink (the temp file's write method)
    and is responsible for pumping bytes from one to the other. Callers use it
    to observe the bytes on the way through, e.g. to hash them.

    Args:
        target_path: Where the final file should end up.
        source: Readable binary stream, consumed to EOF.
        copy: Function doing the actual chunked copy.

    Returns:
        Whatever `copy` returned, once the target is in place.

    Raises:
        OSError: If reading, writing or the final rename fails.
    """
    return _write_atomically(target_path, lambda out: copy(source, out.write))
