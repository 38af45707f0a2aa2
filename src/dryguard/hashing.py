"""Content digests for tree entries."""
from __future__ import annotations

import hashlib
from pathlib import Path

from dryguard.errors import ConfigError, FileUnavailableError
from dryguard.tree import TreeEntry

#: Digest assigned to every directory. No real digest is zero bytes long.
EMPTY_DIGEST = b""

DEFAULT_CHUNK_SIZE = 65536


def hash_file(
    path: str | Path,
    *,
    algorithm: str = "sha256",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bytes:
    """Stream the file at *path* through *algorithm* and return the digest.

    Raises
    ------
    FileUnavailableError
        If the file disappeared or cannot be read.
    ConfigError
        If *algorithm* is not supported by :mod:`hashlib` or, like the
        SHAKE family, produces variable-length output.
    """
    try:
        hasher = hashlib.new(algorithm)
    except ValueError as exc:
        raise ConfigError(f"Unknown hash algorithm {algorithm!r}") from exc
    if hasher.digest_size == 0:
        raise ConfigError(f"Hash algorithm {algorithm!r} has no fixed digest size")
    try:
        with open(path, "rb") as stream:
            while chunk := stream.read(chunk_size):
                hasher.update(chunk)
    except OSError as exc:
        raise FileUnavailableError(path, exc) from exc
    return hasher.digest()


def digest_entry(
    entry: TreeEntry,
    *,
    algorithm: str = "sha256",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bytes:
    """Return the digest of *entry*; directories get :data:`EMPTY_DIGEST` without I/O."""
    if entry.is_directory:
        return EMPTY_DIGEST
    return hash_file(entry.absolute_path, algorithm=algorithm, chunk_size=chunk_size)
