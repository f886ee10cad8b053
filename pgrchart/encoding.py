"""Base64, SHA-1 and JSON helpers shared by the packers."""

from __future__ import annotations

import base64
import hashlib
import itertools
import json
from typing import Any

_ALPHABET = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/")


def _as_bytes(data: bytes | bytearray | memoryview | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def base64_encode(data: bytes | bytearray | memoryview | str) -> str:
    """Encode ``data`` as padded standard base64."""
    return base64.b64encode(_as_bytes(data)).decode("ascii")


def base64_decode(text: str) -> bytes:
    """Decode base64 text, stopping at the first padding or non-alphabet character.

    Missing padding is tolerated; a trailing lone digit carries no whole byte and is dropped.
    """
    digits = "".join(itertools.takewhile(lambda ch: ch in _ALPHABET, text))
    usable = len(digits) * 3 // 4
    padded = digits + "A" * (-len(digits) % 4)
    return base64.b64decode(padded)[:usable]


def sha1(data: bytes | bytearray | memoryview | str) -> bytes:
    """Raw 20-byte SHA-1 digest of ``data``."""
    return hashlib.sha1(_as_bytes(data)).digest()


def json_encode(value: Any) -> str:
    """Compact JSON with sorted keys, ending in a newline."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False) + "\n"


def json_pretty_encode(value: Any) -> str:
    """Indented JSON with sorted keys, ending in a newline."""
    return json.dumps(value, sort_keys=True, indent=3, separators=(",", " : "), ensure_ascii=False) + "\n"


def json_decode(text: str | bytes) -> Any:
    """Parse JSON text; raises ``ValueError`` when it is malformed."""
    return json.loads(text)