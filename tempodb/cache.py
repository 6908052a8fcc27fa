"""Reader/writer that caches whole-object reads in front of another backend."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, BinaryIO

from tempodb.backend import Reader, UnsupportedError, Writer
from tempodb.block_meta import BlockMeta


class Cache(ABC):
    """Key/value store for object bodies."""

    @abstractmethod
    def store(self, keys: list[str], bufs: list[bytes]) -> None:
        """Store each buffer under the matching key."""

    @abstractmethod
    def fetch(self, keys: list[str]) -> tuple[list[str], list[bytes], list[str]]:
        """Return the found keys, their buffers and the missing keys."""

    @abstractmethod
    def stop(self) -> None:
        """Release the cache."""


def cache_key(block_id: uuid.UUID, tenant_id: str, name: str) -> str:
    """Return the cache key of an object."""
    return f"{block_id}:{tenant_id}:{name}"


class CachedReaderWriter(Reader, Writer):
    """Caches read and write of whole objects; everything else passes through."""

    def __init__(self, next_reader: Reader, next_writer: Writer, cache: Cache) -> None:
        self.next_reader = next_reader
        self.next_writer = next_writer
        self.cache = cache

    def tenants(self) -> list[str] | None:
        return self.next_reader.tenants()

    def blocks(self, tenant_id: str) -> list[uuid.UUID] | None:
        return self.next_reader.blocks(tenant_id)

    def block_meta(self, block_id: uuid.UUID, tenant_id: str) -> BlockMeta | None:
        return self.next_reader.block_meta(block_id, tenant_id)

    def read(self, name: str, block_id: uuid.UUID, tenant_id: str) -> bytes:
        key = cache_key(block_id, tenant_id, name)
        found, bufs, _ = self.cache.fetch([key])
        if found:
            return bufs[0]
        value = self.next_reader.read(name, block_id, tenant_id)
        self.cache.store([key], [value])
        return value

    def read_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str
    ) -> tuple[BinaryIO, int]:
        raise UnsupportedError("read_reader is not supported by the cache")

    def read_range(
        self, name: str, block_id: uuid.UUID, tenant_id: str, offset: int, length: int
    ) -> bytes:
        return self.next_reader.read_range(name, block_id, tenant_id, offset, length)

    def shutdown(self) -> None:
        self.next_reader.shutdown()
        self.cache.stop()

    def write(self, name: str, block_id: uuid.UUID, tenant_id: str, data: bytes) -> None:
        self.cache.store([cache_key(block_id, tenant_id, name)], [data])
        self.next_writer.write(name, block_id, tenant_id, data)

    def write_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str, stream: BinaryIO, size: int
    ) -> None:
        self.next_writer.write_reader(name, block_id, tenant_id, stream, size)

    def write_block_meta(self, meta: BlockMeta) -> None:
        self.next_writer.write_block_meta(meta)

    def append(
        self, name: str, block_id: uuid.UUID, tenant_id: str, tracker: Any, data: bytes
    ) -> Any:
        return self.next_writer.append(name, block_id, tenant_id, tracker, data)

    def close_append(self, tracker: Any) -> None:
        self.next_writer.close_append(tracker)