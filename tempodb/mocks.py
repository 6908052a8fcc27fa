"""In-memory reader and writer for use in tests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable

from tempodb.backend import Reader, UnsupportedError, Writer
from tempodb.block_meta import BlockMeta


@dataclass
class MockReader(Reader):
    """Reader that returns fixed values."""

    tenant_ids: list[str] | None = None
    block_ids: list[uuid.UUID] | None = None
    meta: BlockMeta | None = None
    data: bytes | None = None
    range_data: bytes = b""
    read_fn: Callable[[str, uuid.UUID, str], bytes] | None = None

    def tenants(self) -> list[str] | None:
        return self.tenant_ids

    def blocks(self, tenant_id: str) -> list[uuid.UUID] | None:
        return self.block_ids

    def block_meta(self, block_id: uuid.UUID, tenant_id: str) -> BlockMeta | None:
        return self.meta

    def read(self, name: str, block_id: uuid.UUID, tenant_id: str) -> bytes | None:
        if self.read_fn is not None:
            return self.read_fn(name, block_id, tenant_id)
        return self.data

    def read_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str
    ) -> tuple[BinaryIO, int]:
        raise UnsupportedError("read_reader is not supported by the mock reader")

    def read_range(
        self, name: str, block_id: uuid.UUID, tenant_id: str, offset: int, length: int
    ) -> bytes:
        return self.range_data[:length].ljust(length, b"\x00")

    def shutdown(self) -> None:
        return None


@dataclass
class MockWriter(Writer):
    """Writer that stores nothing but records each call it receives."""

    calls: list[tuple[Any, ...]] = field(default_factory=list)

    def write(self, name: str, block_id: uuid.UUID, tenant_id: str, data: bytes) -> None:
        self.calls.append(("write", name, block_id, tenant_id, data))

    def write_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str, stream: BinaryIO, size: int
    ) -> None:
        self.calls.append(("write_reader", name, block_id, tenant_id, size))

    def write_block_meta(self, meta: BlockMeta) -> None:
        self.calls.append(("write_block_meta", meta))

    def append(
        self, name: str, block_id: uuid.UUID, tenant_id: str, tracker: Any, data: bytes
    ) -> Any:
        self.calls.append(("append", name, block_id, tenant_id, data))
        return None

    def close_append(self, tracker: Any) -> None:
        self.calls.append(("close_append", tracker))