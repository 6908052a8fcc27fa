"""Block compression encodings and their text forms."""

from __future__ import annotations

import json
from enum import IntEnum

import yaml


class Encoding(IntEnum):
    """Compression algorithm of a block.

    The numeric values are stored in blocks, so their order must not change.
    """

    NONE = 0
    GZIP = 1
    LZ4_64K = 2
    LZ4_256K = 3
    LZ4_1M = 4
    LZ4_4M = 5
    SNAPPY = 6
    ZSTD = 7

    def __str__(self) -> str:
        return _NAMES[self]

    def to_json(self) -> str:
        """Return the encoding as a JSON string literal."""
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, text: str) -> Encoding:
        """Parse an encoding from a JSON string literal."""
        value = json.loads(text)
        if not isinstance(value, str):
            raise ValueError(f"expected a JSON string for encoding, got {text!r}")
        return parse_encoding(value)

    def to_yaml(self) -> str:
        """Return the encoding as a YAML document."""
        return yaml.safe_dump(str(self))

    @classmethod
    def from_yaml(cls, text: str) -> Encoding:
        """Parse an encoding from a YAML document holding its name."""
        value = yaml.safe_load(text)
        if not isinstance(value, str):
            raise ValueError(f"expected a YAML string for encoding, got {text!r}")
        return parse_encoding(value)


_NAMES = {
    Encoding.NONE: "none",
    Encoding.GZIP: "gzip",
    Encoding.LZ4_64K: "lz4-64k",
    Encoding.LZ4_256K: "lz4-256k",
    Encoding.LZ4_1M: "lz4-1M",
    Encoding.LZ4_4M: "lz4",
    Encoding.SNAPPY: "snappy",
    Encoding.ZSTD: "zstd",
}

SUPPORTED_ENCODING: tuple[Encoding, ...] = tuple(Encoding)


def supported_encoding_string() -> str:
    """Return the names of all supported encodings, comma separated."""
    return ", ".join(str(enc) for enc in SUPPORTED_ENCODING)


def parse_encoding(enc: str) -> Encoding:
    """Look up an encoding by its name, ignoring case."""
    wanted = enc.casefold()
    for candidate in SUPPORTED_ENCODING:
        if str(candidate).casefold() == wanted:
            return candidate
    raise ValueError(
        f"invalid encoding: {enc}, supported: {supported_encoding_string()}"
    )