# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for hashing utilities.

The checksum recorded in a manifest is what Vagrant checks on download, so
the streamed digest must match a plain one-shot digest byte for byte.
"""

import hashlib
import io
from pathlib import Path

from boxvault.utils.hashing import (
    HASH_BUFFER_SIZE,
    compute_sha256,
    compute_sha256_bytes,
    compute_sha256_stream,
    is_sha256_hex,
)


class TestSha256:
    def test_empty_bytes_has_known_hash(self) -> None:
        expected = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert compute_sha256_bytes(b"") == expected

    def test_different_bytes_produce_different_hash(self) -> None:
        assert compute_sha256_bytes(b"input_a") != compute_sha256_bytes(b"input_b")

    def test_file_hash_matches_bytes_hash(self, tmp_path: Path) -> None:
        content = b"some box content for hashing"
        target = tmp_path / "test.box"
        target.write_bytes(content)

        assert compute_sha256(target) == compute_sha256_bytes(content)


class TestStreamHashing:
    def test_multi_chunk_stream_matches_hashlib(self) -> None:
        data = bytes(range(256)) * (HASH_BUFFER_SIZE // 64)
        assert len(data) > HASH_BUFFER_SIZE

        digest = compute_sha256_stream(io.BytesIO(data))
        assert digest == hashlib.sha256(data).hexdigest()

    def test_chunks_are_handed_to_sink_in_order(self) -> None:
        data = b"x" * (HASH_BUFFER_SIZE * 2 + 17)
        received: list[bytes] = []

        compute_sha256_stream(io.BytesIO(data), on_chunk=received.append)

        assert b"".join(received) == data
        assert len(received) == 3

    def test_hashes_from_current_position(self) -> None:
        stream = io.BytesIO(b"headerpayload")
        stream.read(6)
        assert compute_sha256_stream(stream) == compute_sha256_bytes(b"payload")


class TestHexValidation:
    def test_accepts_lowercase_digest(self) -> None:
        assert is_sha256_hex(compute_sha256_bytes(b"box"))

    def test_rejects_uppercase_and_wrong_length(self) -> None:
        digest = compute_sha256_bytes(b"box")
        assert not is_sha256_hex(digest.upper())
        assert not is_sha256_hex(digest[:-1])
        assert not is_sha256_hex("")
