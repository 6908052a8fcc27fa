"""Object naming inside a backend."""

from __future__ import annotations

import os
import posixpath
import uuid


def root_path(block_id: uuid.UUID, tenant_id: str) -> str:
    """Return the directory of a block: tenant/block-id."""
    return posixpath.join(tenant_id, str(block_id))


def meta_file_name(block_id: uuid.UUID, tenant_id: str) -> str:
    """Return the name of a block's meta file."""
    return posixpath.join(root_path(block_id, tenant_id), "meta.json")


def object_file_name(block_id: uuid.UUID, tenant_id: str, name: str) -> str:
    """Return the name of an object inside a block."""
    return posixpath.join(root_path(block_id, tenant_id), name)


def compacted_meta_file_name(block_id: uuid.UUID, tenant_id: str) -> str:
    """Return the name of a block's compacted meta file."""
    return posixpath.join(root_path(block_id, tenant_id), "meta.compacted.json")


def file_exists(filename: str | os.PathLike[str]) -> bool:
    """Return whether a file exists; other stat errors are raised."""
    try:
        os.stat(filename)
    except FileNotFoundError:
        return False
    return True