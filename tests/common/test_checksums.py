"""Tests for content digest utilities."""

import hashlib

import pytest

from gtakeout_reconcile.common.checksums import DIGEST_CHUNK_SIZE, compute_sha3_256


class TestComputeSHA3:
    """Tests for compute_sha3_256 function."""

    def test_matches_hashlib(self, tmp_path):
        """Test that the streamed digest equals a one-shot SHA3-256."""
        file_path = tmp_path / "photo.jpg"
        content = b"\xff\xd8\xff\xe0" + b"JFIF" * 100
        file_path.write_bytes(content)

        assert compute_sha3_256(file_path) == hashlib.sha3_256(content).digest()

    def test_same_content_same_digest(self, tmp_path):
        """Test that identical files produce identical digests."""
        file1 = tmp_path / "a.jpg"
        file2 = tmp_path / "b.jpg"
        file1.write_bytes(b"same bytes")
        file2.write_bytes(b"same bytes")

        assert compute_sha3_256(file1) == compute_sha3_256(file2)

    def test_different_content_different_digest(self, tmp_path):
        """Test that different files produce different digests."""
        file1 = tmp_path / "a.jpg"
        file2 = tmp_path / "b.jpg"
        file1.write_bytes(b"Content A")
        file2.write_bytes(b"Content B")

        assert compute_sha3_256(file1) != compute_sha3_256(file2)

    def test_chunk_size_does_not_change_digest(self, tmp_path):
        """Test that files larger than one chunk hash the same at any chunk size."""
        large_file = tmp_path / "video.mp4"
        large_file.write_bytes(bytes(range(256)) * 1024)

        assert compute_sha3_256(large_file, chunk_size=7) == compute_sha3_256(large_file)
        assert DIGEST_CHUNK_SIZE == 65536

    def test_empty_file(self, tmp_path):
        """Test digest of an empty file."""
        empty_file = tmp_path / "empty.bin"
        empty_file.write_bytes(b"")

        digest = compute_sha3_256(empty_file)

        assert len(digest) == 32
        assert digest == hashlib.sha3_256(b"").digest()

    def test_nonexistent_file(self, tmp_path):
        """Test that a missing file raises OSError."""
        with pytest.raises(OSError):
            compute_sha3_256(tmp_path / "does_not_exist.jpg")

