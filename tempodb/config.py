"""Compaction configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import timedelta
from fractions import Fraction
from typing import Any, Mapping

import yaml

DEFAULT_BLOCKLIST_POLL_CONCURRENCY = 50
DEFAULT_RETENTION_CONCURRENCY = 10

_UINT32_MAX = 2**32 - 1
_UINT64_MAX = 2**64 - 1
_INT64_MAX = 2**63 - 1

_NANOS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")


def _parse_duration(text: str) -> timedelta:
    """Parse a duration such as "1h30m" or "250ms"."""
    body = text
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")
    total = Fraction(0)
    position = 0
    while position < len(body):
        match = _DURATION_PART.match(body, position)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += Fraction(match.group(1)) * _NANOS[match.group(2)]
        position = match.end()
    return timedelta(microseconds=int(sign * total / 1000))


def _duration(key: str, value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"{key}: expected a duration, got {value!r}")
    if isinstance(value, int):
        return timedelta(microseconds=value // 1000)  # bare integers are nanoseconds
    if isinstance(value, str):
        return _parse_duration(value)
    raise ValueError(f"{key}: expected a duration, got {value!r}")


def _integer(key: str, value: Any, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key}: expected an integer, got {value!r}")
    if not low <= value <= high:
        raise ValueError(f"{key}: {value} is out of range")
    return value


@dataclass
class CompactorConfig:
    """Options that control compaction and retention."""

    chunk_size_bytes: int = 0
    flush_size_bytes: int = 0
    max_compaction_range: timedelta = timedelta(0)
    max_compaction_objects: int = 0
    max_block_bytes: int = 0
    block_retention: timedelta = timedelta(0)
    compacted_block_retention: timedelta = timedelta(0)
    retention_concurrency: int = 0
    iterator_buffer_size: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CompactorConfig:
        """Build from a mapping keyed by the configuration file's names."""
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ValueError(f"compactor config must be a mapping, got {type(data).__name__}")

        parsers = {
            "chunk_size_bytes": ("chunk_size_bytes", lambda k, v: _integer(k, v, 0, _UINT32_MAX)),
            "flush_size_bytes": ("flush_size_bytes", lambda k, v: _integer(k, v, 0, _UINT32_MAX)),
            "compaction_window": ("max_compaction_range", _duration),
            "max_compaction_objects": (
                "max_compaction_objects",
                lambda k, v: _integer(k, v, -_INT64_MAX - 1, _INT64_MAX),
            ),
            "max_block_bytes": ("max_block_bytes", lambda k, v: _integer(k, v, 0, _UINT64_MAX)),
            "block_retention": ("block_retention", _duration),
            "compacted_block_retention": ("compacted_block_retention", _duration),
            "retention_concurrency": (
                "retention_concurrency",
                lambda k, v: _integer(k, v, 0, _UINT64_MAX),
            ),
            "iterator_buffer_size": (
                "iterator_buffer_size",
                lambda k, v: _integer(k, v, -_INT64_MAX - 1, _INT64_MAX),
            ),
        }
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in parsers:
                continue
            attribute, parse = parsers[key]
            values[attribute] = parse(key, value)
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})

    @classmethod
    def from_yaml(cls, text: str) -> CompactorConfig:
        """Parse a YAML document holding the compactor section."""
        return cls.from_dict(yaml.safe_load(text))