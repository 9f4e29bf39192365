"""Content digest utilities for duplicate detection."""

import hashlib
from pathlib import Path

# Read buffer size for streaming digests; does not affect the result
DIGEST_CHUNK_SIZE = 65536  # 64 KB chunks


def compute_sha3_256(file_path: Path, chunk_size: int = DIGEST_CHUNK_SIZE) -> bytes:
    """
    Compute the SHA3-256 digest of an entire file.

    The file is streamed through a fixed-size buffer so memory use stays
    flat for large videos.

    Args:
        file_path: Path to the file
        chunk_size: Read buffer size in bytes

    Returns:
        Raw 32-byte digest

    Raises:
        OSError: If file cannot be read
    """
    hasher = hashlib.sha3_256()

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.digest()

