"""Shared helpers for streaming sources and computing checksums.

Key utilities:
- Chunked iteration over any supported insert source
- Hasher factory for multiple algorithms
- Checksums over open file handles

Example usage:
    >>> from filestore.utils import iter_chunks
    >>> list(iter_chunks("Hello, world!"))
    [b'Hello, world!']
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any

from .context import check
from .interfaces import DEFAULT_CHUNK_SIZE, ChecksumAlgorithm

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .context import Context
    from .interfaces import File, Source


def get_hasher(algorithm: ChecksumAlgorithm) -> Any:
    """Get a hasher instance for the specified algorithm.

    Args:
        algorithm: The checksum algorithm to use ('md5', 'sha256', 'sha512', 'blake3')

    Returns:
        A hasher instance with update() and hexdigest() methods

    Raises:
        ImportError: If blake3 is requested but not installed.
        ValueError: If algorithm is not supported.

    """
    if algorithm == "blake3":
        try:
            import blake3
        except ImportError as exc:
            message = "blake3 is not installed. Install it with: pip install blake3"
            raise ImportError(message) from exc
        return blake3.blake3()
    elif algorithm in ("md5", "sha256", "sha512"):
        return hashlib.new(algorithm)
    else:
        message = f"Unsupported checksum algorithm: {algorithm}"
        raise ValueError(message)


def _as_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    message = f"Unsupported stream payload type: {type(chunk).__name__}"
    raise TypeError(message)


def iter_chunks(
    source: Source,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Yield the content of ``source`` as byte chunks.

    Accepts bytes-like objects, text (UTF-8 encoded), file-like objects with
    ``read()`` and iterables of bytes or text chunks. File-like sources are
    consumed from their current position and never rewound.

    Raises:
        TypeError: If the source or one of its chunks is not supported.

    """
    if isinstance(source, (bytes, bytearray, memoryview, str)):
        payload = _as_bytes(source)
        for offset in range(0, len(payload), chunk_size):
            yield payload[offset : offset + chunk_size]
        return

    if hasattr(source, "read"):
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            yield _as_bytes(chunk)
        return

    try:
        iterator = iter(source)
    except TypeError as exc:
        message = f"Unsupported data type: {type(source).__name__}"
        raise TypeError(message) from exc
    for chunk in iterator:
        if chunk:
            yield _as_bytes(chunk)


def compute_checksum_from_stream(
    handle: File,
    algorithm: ChecksumAlgorithm = "sha256",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    ctx: Context | None = None,
) -> str:
    """Compute the checksum of everything left to read in ``handle``.

    Args:
        handle: Open, readable handle
        algorithm: Checksum algorithm to use
        chunk_size: Size of chunks to read
        ctx: Optional context checked between chunks

    Returns:
        Hexadecimal checksum string.

    """
    hasher = get_hasher(algorithm)
    while True:
        check(ctx)
        chunk = handle.read(chunk_size)
        if not chunk:
            break
        hasher.update(chunk)
    return hasher.hexdigest()
