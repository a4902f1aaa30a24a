# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for boxvault.

Every provider entry in a box manifest carries a SHA256 checksum, and
Vagrant verifies it on download. A wrong checksum means a box nobody can
install, so the digest is always computed from the exact bytes we store.

Boxes are often several gigabytes, so everything here streams in fixed-size
chunks instead of reading whole files into memory.
"""

import hashlib
import re
from pathlib import Path
from typing import BinaryIO, Callable

HASH_ALGORITHM = "sha256"
HASH_BUFFER_SIZE = 65536  # 64 KiB

_SHA256_HEX_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def compute_sha256(file_path: Path) -> str:
    """
    Compute the SHA256 hex digest of a file, reading it in 64 KiB chunks.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If the file can't be read.
    """
    with open(file_path, "rb") as f:
        return compute_sha256_stream(f)


def compute_sha256_stream(
    stream: BinaryIO,
    on_chunk: Callable[[bytes], object] | None = None,
) -> str:
    """
    Hash a binary stream from its current position to EOF.

    If `on_chunk` is given, every chunk is handed to it after being fed to the
    hasher. This is how the publisher copies a box and checksums it in one
    pass: the callback is the destination file's write method.

    Args:
        stream: Readable binary stream.
        on_chunk: Optional sink for each chunk read.

    Returns:
        Lowercase hex string of the SHA256 digest.
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    while True:
        chunk = stream.read(HASH_BUFFER_SIZE)
        if not chunk:
            break
        hasher.update(chunk)
        if on_chunk is not None:
            on_chunk(chunk)
    return hasher.hexdigest()


def compute_sha256_bytes(data: bytes) -> str:
    """Compute the SHA256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def is_sha256_hex(value: str) -> bool:
    """True if `value` looks like a lowercase hex SHA256 digest."""
    return bool(_SHA256_HEX_PATTERN.match(value))

