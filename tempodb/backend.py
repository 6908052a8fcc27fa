"""Storage backend interfaces, errors and readers over stored objects."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, BinaryIO

from tempodb.block_meta import BlockMeta, CompactedBlockMeta


class BackendError(Exception):
    """Base class of backend errors."""


class MetaDoesNotExistError(BackendError):
    """The meta file of a block is not present."""

    def __init__(self, message: str = "meta does not exist") -> None:
        super().__init__(message)


class EmptyTenantIDError(BackendError):
    """An operation was given an empty tenant id."""

    def __init__(self, message: str = "empty tenant id") -> None:
        super().__init__(message)


class EmptyBlockIDError(BackendError):
    """An operation was given the nil block id."""

    def __init__(self, message: str = "empty block id") -> None:
        super().__init__(message)


class UnsupportedError(BackendError):
    """The operation is not supported by this implementation."""

    def __init__(self, message: str = "unsupported") -> None:
        super().__init__(message)


class Writer(ABC):
    """Writes block data and meta to a backend."""

    @abstractmethod
    def write(self, name: str, block_id: uuid.UUID, tenant_id: str, data: bytes) -> None:
        """Write an in-memory object; it may be cached."""

    @abstractmethod
    def write_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str, stream: BinaryIO, size: int
    ) -> None:
        """Write a larger object streamed from a file-like object."""

    @abstractmethod
    def write_block_meta(self, meta: BlockMeta) -> None:
        """Write the meta file of a block."""

    @abstractmethod
    def append(
        self, name: str, block_id: uuid.UUID, tenant_id: str, tracker: Any, data: bytes
    ) -> Any:
        """Append to an object; pass None to start, then the returned tracker."""

    @abstractmethod
    def close_append(self, tracker: Any) -> None:
        """Finish an append operation."""


class Reader(ABC):
    """Reads block data and meta from a backend."""

    @abstractmethod
    def read(self, name: str, block_id: uuid.UUID, tenant_id: str) -> bytes:
        """Read a whole object; it may come from a cache."""

    @abstractmethod
    def read_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str
    ) -> tuple[BinaryIO, int]:
        """Open a whole object as a stream, returning it with its size."""

    @abstractmethod
    def read_range(
        self, name: str, block_id: uuid.UUID, tenant_id: str, offset: int, length: int
    ) -> bytes:
        """Read part of a large object."""

    @abstractmethod
    def tenants(self) -> list[str] | None:
        """List the tenants that have blocks."""

    @abstractmethod
    def blocks(self, tenant_id: str) -> list[uuid.UUID] | None:
        """List the block ids of a tenant."""

    @abstractmethod
    def block_meta(self, block_id: uuid.UUID, tenant_id: str) -> BlockMeta | None:
        """Read the meta of a block."""

    @abstractmethod
    def shutdown(self) -> None:
        """Release resources held by the reader."""


class Compactor(ABC):
    """Operates on compacted blocks."""

    @abstractmethod
    def mark_block_compacted(self, block_id: uuid.UUID, tenant_id: str) -> None:
        """Mark a block as compacted."""

    @abstractmethod
    def clear_block(self, block_id: uuid.UUID, tenant_id: str) -> None:
        """Remove every object of a block."""

    @abstractmethod
    def compacted_block_meta(
        self, block_id: uuid.UUID, tenant_id: str
    ) -> CompactedBlockMeta:
        """Read the meta of a compacted block."""


class ContextReader(ABC):
    """Random access to a single stored object."""

    @abstractmethod
    def read_at(self, size: int, offset: int) -> bytes:
        """Read size bytes starting at offset."""

    @abstractmethod
    def read_all(self) -> bytes:
        """Read the whole object."""

    @abstractmethod
    def reader(self) -> BinaryIO:
        """Return a stream over the object, where supported."""


class BackendContextReader(ContextReader):
    """Reads one named object of a block through a backend Reader."""

    def __init__(self, meta: BlockMeta, name: str, reader: Reader) -> None:
        self._meta = meta
        self._name = name
        self._reader = reader

    def read_at(self, size: int, offset: int) -> bytes:
        return self._reader.read_range(
            self._name, self._meta.block_id, self._meta.tenant_id, offset, size
        )

    def read_all(self) -> bytes:
        return self._reader.read(self._name, self._meta.block_id, self._meta.tenant_id)

    def reader(self) -> BinaryIO:
        raise UnsupportedError("streaming is not supported by a backend reader")


class StreamContextReader(ContextReader):
    """Wraps a seekable binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read_at(self, size: int, offset: int) -> bytes:
        position = self._stream.tell()
        try:
            self._stream.seek(offset)
            data = self._stream.read(size)
        finally:
            self._stream.seek(position)
        if len(data) < size:
            raise EOFError(f"read {len(data)} of {size} bytes at offset {offset}")
        return data

    def read_all(self) -> bytes:
        return self._stream.read()

    def reader(self) -> BinaryIO:
        return self._stream