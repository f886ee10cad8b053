import gzip
import zlib

import pytest

from pgrchart.compression import (
    CompressionError,
    compress_deflate,
    compress_gzip,
    decompress_deflate,
    decompress_gzip,
)

SAMPLE = b'{"clips":[{"name":"#PERFECT","filename":"0"}]}' * 20


def test_gzip_round_trip():
    assert decompress_gzip(compress_gzip(SAMPLE)) == SAMPLE


def test_gzip_magic_bytes():
    assert compress_gzip(SAMPLE)[:2] == b"\x1f\x8b"


def test_gzip_readable_by_standard_library():
    assert gzip.decompress(compress_gzip(SAMPLE)) == SAMPLE


def test_gzip_accepts_text():
    assert decompress_gzip(compress_gzip("hello")) == b"hello"


def test_gzip_reads_standard_library_output():
    assert decompress_gzip(gzip.compress(SAMPLE)) == SAMPLE


def test_deflate_round_trip():
    assert decompress_deflate(compress_deflate(SAMPLE)) == SAMPLE


def test_deflate_header_at_best_compression():
    assert compress_deflate(SAMPLE)[:2] == b"\x78\xda"


def test_deflate_matches_zlib():
    assert zlib.decompress(compress_deflate(SAMPLE, 1)) == SAMPLE


def test_empty_round_trip():
    assert decompress_gzip(compress_gzip(b"")) == b""
    assert decompress_deflate(compress_deflate(b"")) == b""


def test_truncated_gzip_fails():
    with pytest.raises(CompressionError):
        decompress_gzip(compress_gzip(SAMPLE)[:-10])


def test_garbage_deflate_fails():
    with pytest.raises(CompressionError):
        decompress_deflate(b"not compressed at all")


def test_bad_level_fails():
    with pytest.raises(CompressionError):
        compress_gzip(SAMPLE, 42)
    with pytest.raises(CompressionError):
        compress_deflate(SAMPLE, 42)