"""Metadata describing a stored block."""

from __future__ import annotations

import base64
import json
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from tempodb.encoding import Encoding, parse_encoding

NIL_UUID = uuid.UUID(int=0)
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.match(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BlockMeta:
    """Description of a block: identity, id range, times, sizes and formats."""

    version: str = ""
    block_id: uuid.UUID = NIL_UUID
    min_id: bytes = b""
    max_id: bytes = b""
    tenant_id: str = ""
    start_time: datetime = ZERO_TIME
    end_time: datetime = ZERO_TIME
    total_objects: int = 0
    size: int = 0
    compaction_level: int = 0
    encoding: Encoding = Encoding.NONE
    index_page_size: int = 0
    total_records: int = 0
    data_encoding: str = ""
    bloom_shard_count: int = 0

    def object_added(self, object_id: bytes) -> None:
        """Record that an object with the given id was written to the block."""
        self.end_time = _now()
        if not self.min_id or object_id < self.min_id:
            self.min_id = object_id
        if not self.max_id or object_id > self.max_id:
            self.max_id = object_id
        self.total_objects += 1

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping stored in a block's meta file."""
        return {
            "format": self.version,
            "blockID": str(self.block_id),
            "minID": base64.b64encode(self.min_id).decode("ascii"),
            "maxID": base64.b64encode(self.max_id).decode("ascii"),
            "tenantID": self.tenant_id,
            "startTime": _format_time(self.start_time),
            "endTime": _format_time(self.end_time),
            "totalObjects": self.total_objects,
            "size": self.size,
            "compactionLevel": self.compaction_level,
            "encoding": str(self.encoding),
            "indexPageSize": self.index_page_size,
            "totalRecords": self.total_records,
            "dataEncoding": self.data_encoding,
            "bloomShards": self.bloom_shard_count,
        }

    def to_json(self) -> str:
        """Serialise to the meta file's JSON form."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build from a mapping in the meta file's form; missing keys take defaults."""

        def decode_id(key: str) -> bytes:
            value = data.get(key)
            return b"" if value is None else base64.b64decode(value, validate=True)

        def decode_time(key: str) -> datetime:
            value = data.get(key)
            return ZERO_TIME if value is None else _parse_time(value)

        encoding_name = data.get("encoding")
        block_id = data.get("blockID")
        return cls(
            version=data.get("format", ""),
            block_id=NIL_UUID if block_id is None else uuid.UUID(block_id),
            min_id=decode_id("minID"),
            max_id=decode_id("maxID"),
            tenant_id=data.get("tenantID", ""),
            start_time=decode_time("startTime"),
            end_time=decode_time("endTime"),
            total_objects=int(data.get("totalObjects", 0)),
            size=int(data.get("size", 0)),
            compaction_level=int(data.get("compactionLevel", 0)),
            encoding=Encoding.NONE if encoding_name is None else parse_encoding(encoding_name),
            index_page_size=int(data.get("indexPageSize", 0)),
            total_records=int(data.get("totalRecords", 0)),
            data_encoding=data.get("dataEncoding", ""),
            bloom_shard_count=int(data.get("bloomShards", 0)),
        )

    @classmethod
    def from_json(cls, text: str | bytes):
        """Parse the meta file's JSON form."""
        return cls.from_dict(json.loads(text))


@dataclass
class CompactedBlockMeta(BlockMeta):
    """Meta of a block that has been compacted away, with the time it happened."""

    compacted_time: datetime = ZERO_TIME

    @classmethod
    def from_json(cls, text: str | bytes, compacted_time: datetime) -> CompactedBlockMeta:
        """Parse a compacted meta file; the compaction time is not stored in it."""
        meta = cls.from_dict(json.loads(text))
        meta.compacted_time = compacted_time
        return meta


def new_block_meta(
    tenant_id: str,
    block_id: uuid.UUID,
    version: str,
    encoding: Encoding,
    data_encoding: str,
) -> BlockMeta:
    """Create meta for a new, empty block started now."""
    now = _now()
    return BlockMeta(
        version=version,
        block_id=block_id,
        tenant_id=tenant_id,
        start_time=now,
        end_time=now,
        encoding=encoding,
        data_encoding=data_encoding,
    )