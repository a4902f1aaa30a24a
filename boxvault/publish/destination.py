# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Storage backends that boxes and manifests get published to.

The publisher and the manifest store only talk to the `Destination`
interface. The filesystem implementation covers local disks and network
mounts; an object store would slot in as another subclass.

Every write is all-or-nothing. Readers either see the previous object or the
complete new one, never a half-written box.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable

from boxvault.logging.logger import get_logger
from boxvault.utils.filesystem import atomic_copy_stream, atomic_write_bytes
from boxvault.utils.hashing import compute_sha256, compute_sha256_stream

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class StreamResult:
    """What a streamed put observed on the way through."""

    checksum: str
    size: int


class Destination(ABC):
    """Where published objects live. Paths are backend-specific strings."""

    @abstractmethod
    def put(self, path: str, data: bytes) -> None:
        """Store `data` at `path`, replacing any existing object atomically."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True if an object is stored at `path`."""

    @abstractmethod
    def get(self, path: str) -> bytes:
        """
        Return the bytes stored at `path`.

        Raises:
            FileNotFoundError: If nothing is stored there.
        """

    @abstractmethod
    def put_stream(self, path: str, source: BinaryIO) -> StreamResult:
        """
        Stream `source` to `path`, computing the SHA256 of exactly the bytes
        stored. The object only becomes visible once the copy is complete.
        """

    @abstractmethod
    def checksum(self, path: str) -> str:
        """SHA256 hex digest of the object stored at `path`."""


class FilesystemDestination(Destination):
    """Destination backed by the local filesystem. Paths are file paths."""

    def put(self, path: str, data: bytes) -> None:
        atomic_write_bytes(Path(path), data)
        _logger.debug("Object written", extra={"path": path, "size": len(data)})

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def get(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def put_stream(self, path: str, source: BinaryIO) -> StreamResult:
        size = 0

        def _copy(stream: BinaryIO, sink: Callable[[bytes], object]) -> str:
            def _write(chunk: bytes) -> None:
                nonlocal size
                sink(chunk)
                size += len(chunk)

            return compute_sha256_stream(stream, on_chunk=_write)

        digest = atomic_copy_stream(Path(path), source, _copy)
        _logger.debug(
            "Object streamed",
            extra={"path": path, "size": size, "sha256": digest[:16] + "..."},
        )
        return StreamResult(checksum=digest, size=size)

    def checksum(self, path: str) -> str:
        return compute_sha256(Path(path))
