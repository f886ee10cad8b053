"""Gzip and zlib (deflate) compression of byte strings."""

from __future__ import annotations

import zlib

_WINDOW_BITS = 15
_GZIP_WINDOW_BITS = _WINDOW_BITS + 16
_MEMORY_LEVEL = 9


class CompressionError(RuntimeError):
    """Raised when data cannot be compressed or decompressed."""


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _compress(data: bytes, level: int, wbits: int) -> bytes:
    try:
        compressor = zlib.compressobj(level, zlib.DEFLATED, wbits, _MEMORY_LEVEL, zlib.Z_DEFAULT_STRATEGY)
        return compressor.compress(data) + compressor.flush(zlib.Z_FINISH)
    except (zlib.error, ValueError) as error:
        raise CompressionError(f"Exception during zlib compression: {error}") from error


def _decompress(data: bytes, wbits: int) -> bytes:
    decompressor = zlib.decompressobj(wbits)
    try:
        result = decompressor.decompress(data)
    except zlib.error as error:
        raise CompressionError(f"Exception during zlib decompression: {error}") from error
    if not decompressor.eof:
        raise CompressionError("Exception during zlib decompression: unexpected end of stream")
    return result


def compress_gzip(data: bytes | bytearray | memoryview | str, level: int = zlib.Z_BEST_COMPRESSION) -> bytes:
    """Compress ``data`` into a gzip stream."""
    return _compress(_as_bytes(data), level, _GZIP_WINDOW_BITS)


def decompress_gzip(data: bytes | bytearray | memoryview) -> bytes:
    """Decompress a complete gzip stream."""
    return _decompress(_as_bytes(data), _GZIP_WINDOW_BITS)


def compress_deflate(data: bytes | bytearray | memoryview | str, level: int = zlib.Z_BEST_COMPRESSION) -> bytes:
    """Compress ``data`` into a zlib-wrapped deflate stream."""
    try:
        return zlib.compress(_as_bytes(data), level)
    except (zlib.error, ValueError) as error:
        raise CompressionError(f"Exception during zlib compression: {error}") from error


def decompress_deflate(data: bytes | bytearray | memoryview) -> bytes:
    """Decompress a complete zlib-wrapped deflate stream."""
    return _decompress(_as_bytes(data), _WINDOW_BITS)