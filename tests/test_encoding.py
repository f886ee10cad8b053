import pytest

from pgrchart.encoding import (
    base64_decode,
    base64_encode,
    json_decode,
    json_encode,
    json_pretty_encode,
    sha1,
)


@pytest.mark.parametrize("data", [b"", b"M", b"Ma", b"Man", bytes(range(256)), b"\x00\xff" * 7])
def test_base64_round_trip(data):
    assert base64_decode(base64_encode(data)) == data


def test_base64_encode_known_value():
    assert base64_encode(b"Man") == "TWFu"


def test_base64_encode_accepts_text():
    assert base64_encode("Man") == base64_encode(b"Man")


def test_base64_decode_stops_at_invalid_character():
    assert base64_decode(base64_encode(b"Man") + "!" + base64_encode(b"xyz")) == b"Man"


def test_base64_decode_without_padding():
    encoded = base64_encode(b"M").rstrip("=")
    assert base64_decode(encoded) == b"M"


def test_base64_decode_drops_lone_trailing_digit():
    assert base64_decode(base64_encode(b"Man") + "T") == b"Man"


def test_sha1_known_vector():
    assert sha1(b"abc").hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"


def test_sha1_text_and_bytes_agree():
    digest = sha1("hello")
    assert len(digest) == 20
    assert digest == sha1(b"hello")


def test_json_encode_sorts_keys_and_ends_with_newline():
    assert json_encode({"b": 1, "a": 2}) == '{"a":2,"b":1}\n'


def test_json_round_trip():
    value = {"list": [1, 2.5, "x"], "nested": {"ok": True, "none": None}}
    assert json_decode(json_encode(value)) == value
    assert json_decode(json_pretty_encode(value)) == value


def test_json_pretty_encode_is_multiline():
    text = json_pretty_encode({"a": [1, 2]})
    assert text.count("\n") > 1
    assert text.endswith("\n")


def test_json_decode_rejects_malformed_text():
    with pytest.raises(ValueError):
        json_decode("{not json")