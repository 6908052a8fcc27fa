"""Backend that keeps blocks in a directory on the local filesystem."""

from __future__ import annotations

import io
import logging
import os
import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, BinaryIO

from tempodb.backend import (
    Compactor,
    EmptyBlockIDError,
    EmptyTenantIDError,
    MetaDoesNotExistError,
    Reader,
    Writer,
)
from tempodb.block_meta import NIL_UUID, BlockMeta, CompactedBlockMeta

logger = logging.getLogger(__name__)

_META_FILE = "meta.json"
_COMPACTED_META_FILE = "meta.compacted.json"


@dataclass
class LocalConfig:
    """Settings of the local backend."""

    path: str = ""


class LocalBackend(Reader, Writer, Compactor):
    """Stores each block as a directory path/tenant/block-id."""

    def __init__(self, config: LocalConfig) -> None:
        os.makedirs(config.path, exist_ok=True)
        self.config = config

    def _root_path(self, block_id: uuid.UUID, tenant_id: str) -> str:
        return os.path.join(self.config.path, tenant_id, str(block_id))

    def _object_file_name(self, block_id: uuid.UUID, tenant_id: str, name: str) -> str:
        return os.path.join(self._root_path(block_id, tenant_id), name)

    def _meta_file_name(self, block_id: uuid.UUID, tenant_id: str) -> str:
        return os.path.join(self._root_path(block_id, tenant_id), _META_FILE)

    def _compacted_meta_file_name(self, block_id: uuid.UUID, tenant_id: str) -> str:
        return os.path.join(self._root_path(block_id, tenant_id), _COMPACTED_META_FILE)

    # Writer

    def write(self, name: str, block_id: uuid.UUID, tenant_id: str, data: bytes) -> None:
        self.write_reader(name, block_id, tenant_id, io.BytesIO(data), len(data))

    def write_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str, stream: BinaryIO, size: int
    ) -> None:
        os.makedirs(self._root_path(block_id, tenant_id), exist_ok=True)
        with open(self._object_file_name(block_id, tenant_id, name), "wb") as dst:
            shutil.copyfileobj(stream, dst)

    def write_block_meta(self, meta: BlockMeta) -> None:
        os.makedirs(self._root_path(meta.block_id, meta.tenant_id), exist_ok=True)
        with open(self._meta_file_name(meta.block_id, meta.tenant_id), "w", encoding="utf-8") as f:
            f.write(meta.to_json())

    def append(
        self, name: str, block_id: uuid.UUID, tenant_id: str, tracker: Any, data: bytes
    ) -> Any:
        if tracker is None:
            os.makedirs(self._root_path(block_id, tenant_id), exist_ok=True)
            dst = open(self._object_file_name(block_id, tenant_id, name), "wb")
        else:
            dst = tracker
        dst.write(data)
        return dst

    def close_append(self, tracker: Any) -> None:
        if tracker is not None:
            tracker.close()

    # Reader

    def tenants(self) -> list[str]:
        with os.scandir(self.config.path) as entries:
            return sorted(entry.name for entry in entries if entry.is_dir())

    def blocks(self, tenant_id: str) -> list[uuid.UUID]:
        with os.scandir(os.path.join(self.config.path, tenant_id)) as entries:
            folders = sorted(entry.name for entry in entries if entry.is_dir())
        block_ids = []
        for folder in folders:
            try:
                block_ids.append(uuid.UUID(folder))
            except ValueError:
                logger.warning("skipping folder that is not a block id: %s", folder)
        return block_ids

    def block_meta(self, block_id: uuid.UUID, tenant_id: str) -> BlockMeta:
        try:
            with open(self._meta_file_name(block_id, tenant_id), "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            raise MetaDoesNotExistError() from None
        return BlockMeta.from_json(raw)

    def read(self, name: str, block_id: uuid.UUID, tenant_id: str) -> bytes:
        with open(self._object_file_name(block_id, tenant_id, name), "rb") as f:
            return f.read()

    def read_range(
        self, name: str, block_id: uuid.UUID, tenant_id: str, offset: int, length: int
    ) -> bytes:
        with open(self._object_file_name(block_id, tenant_id, name), "rb") as f:
            f.seek(offset)
            data = f.read(length)
        if len(data) < length:
            raise EOFError(f"read {len(data)} of {length} bytes at offset {offset}")
        return data

    def read_reader(
        self, name: str, block_id: uuid.UUID, tenant_id: str
    ) -> tuple[BinaryIO, int]:
        f = open(self._object_file_name(block_id, tenant_id, name), "rb")
        try:
            size = os.fstat(f.fileno()).st_size
        except OSError:
            f.close()
            raise
        return f, size

    def shutdown(self) -> None:
        return None

    # Compactor

    def mark_block_compacted(self, block_id: uuid.UUID, tenant_id: str) -> None:
        os.rename(
            self._meta_file_name(block_id, tenant_id),
            self._compacted_meta_file_name(block_id, tenant_id),
        )

    def clear_block(self, block_id: uuid.UUID, tenant_id: str) -> None:
        if not tenant_id:
            raise EmptyTenantIDError()
        if block_id == NIL_UUID:
            raise EmptyBlockIDError()
        shutil.rmtree(self._root_path(block_id, tenant_id), ignore_errors=False) if os.path.exists(
            self._root_path(block_id, tenant_id)
        ) else None

    def compacted_block_meta(
        self, block_id: uuid.UUID, tenant_id: str
    ) -> CompactedBlockMeta:
        filename = self._compacted_meta_file_name(block_id, tenant_id)
        try:
            stat = os.stat(filename)
        except FileNotFoundError:
            raise MetaDoesNotExistError() from None
        with open(filename, "rb") as f:
            raw = f.read()
        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return CompactedBlockMeta.from_json(raw, modified)