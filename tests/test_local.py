import io
import os
import random
import uuid

import pytest

from tempodb.backend import (
    EmptyBlockIDError,
    EmptyTenantIDError,
    MetaDoesNotExistError,
)
from tempodb.block_meta import NIL_UUID, BlockMeta
from tempodb.local import LocalBackend, LocalConfig

OBJECT_NAME = "test"
OBJECT_READER_NAME = "test-reader"


@pytest.fixture
def backend(tmp_path):
    return LocalBackend(LocalConfig(path=str(tmp_path / "traces")))


def _tenant_ids():
    return ["fake"] + [str(random.getrandbits(62)) for _ in range(10)]


def test_creates_root_directory(tmp_path):
    root = tmp_path / "a" / "b"
    LocalBackend(LocalConfig(path=str(root)))
    assert root.is_dir()


def test_read_write(backend):
    block_id = uuid.uuid4()
    tenant_ids = _tenant_ids()
    fake_meta = BlockMeta(block_id=block_id)
    fake_object = os.urandom(20)

    for tenant in tenant_ids:
        fake_meta.tenant_id = tenant
        backend.write_block_meta(fake_meta)
        backend.write(OBJECT_NAME, block_id, tenant, fake_object)
        backend.write_reader(
            OBJECT_READER_NAME, block_id, tenant, io.BytesIO(fake_object), len(fake_object)
        )

    actual_meta = backend.block_meta(block_id, fake_meta.tenant_id)
    assert actual_meta == fake_meta

    assert backend.read(OBJECT_NAME, block_id, tenant_ids[0]) == fake_object

    actual_range = backend.read_range(OBJECT_READER_NAME, block_id, tenant_ids[0], 5, 5)
    assert actual_range == fake_object[5:10]

    assert backend.blocks(tenant_ids[0]) == [block_id]
    assert len(backend.tenants()) == len(tenant_ids)


def test_compaction(backend):
    block_id = uuid.uuid4()
    for tenant in _tenant_ids():
        meta = BlockMeta(block_id=block_id, tenant_id=tenant)
        backend.write_block_meta(meta)

        with pytest.raises(MetaDoesNotExistError):
            backend.compacted_block_meta(block_id, tenant)

        backend.mark_block_compacted(block_id, tenant)

        compacted = backend.compacted_block_meta(block_id, tenant)
        assert compacted.block_id == block_id
        assert compacted.tenant_id == tenant
        assert compacted.compacted_time.year >= 2000

        with pytest.raises(MetaDoesNotExistError):
            backend.block_meta(block_id, tenant)

        backend.clear_block(block_id, tenant)

        with pytest.raises(MetaDoesNotExistError):
            backend.compacted_block_meta(block_id, tenant)
        with pytest.raises(MetaDoesNotExistError):
            backend.block_meta(block_id, tenant)


def test_append_and_close(backend):
    block_id = uuid.uuid4()
    tracker = backend.append("data", block_id, "t", None, b"abc")
    tracker = backend.append("data", block_id, "t", tracker, b"def")
    backend.close_append(tracker)
    assert backend.read("data", block_id, "t") == b"abcdef"


def test_close_append_none_is_noop(backend):
    backend.close_append(None)
    assert backend.tenants() == []


def test_read_reader_returns_stream_and_size(backend):
    block_id = uuid.uuid4()
    backend.write("obj", block_id, "t", b"hello world")
    stream, size = backend.read_reader("obj", block_id, "t")
    with stream:
        assert size == 11
        assert stream.read() == b"hello world"


def test_read_range_past_end_raises(backend):
    block_id = uuid.uuid4()
    backend.write("obj", block_id, "t", b"12345")
    with pytest.raises(EOFError):
        backend.read_range("obj", block_id, "t", 3, 10)


def test_read_missing_object_raises(backend):
    with pytest.raises(FileNotFoundError):
        backend.read("missing", uuid.uuid4(), "t")


def test_tenants_ignores_files(backend):
    backend.write("obj", uuid.uuid4(), "b-tenant", b"x")
    backend.write("obj", uuid.uuid4(), "a-tenant", b"x")
    with open(os.path.join(backend.config.path, "stray.txt"), "w") as f:
        f.write("x")
    assert backend.tenants() == ["a-tenant", "b-tenant"]


def test_blocks_skips_non_uuid_folders(backend):
    block_id = uuid.uuid4()
    backend.write("obj", block_id, "t", b"x")
    os.makedirs(os.path.join(backend.config.path, "t", "not-a-block"))
    assert backend.blocks("t") == [block_id]


def test_blocks_of_unknown_tenant_raises(backend):
    with pytest.raises(FileNotFoundError):
        backend.blocks("nobody")


def test_clear_block_validates_ids(backend):
    with pytest.raises(EmptyTenantIDError):
        backend.clear_block(uuid.uuid4(), "")
    with pytest.raises(EmptyBlockIDError):
        backend.clear_block(NIL_UUID, "t")


def test_clear_missing_block_is_ok(backend):
    kept = uuid.uuid4()
    backend.write("obj", kept, "t", b"x")
    backend.clear_block(uuid.uuid4(), "t")
    assert backend.blocks("t") == [kept]
    assert backend.read("obj", kept, "t") == b"x"


def test_mark_missing_block_compacted_raises(backend):
    with pytest.raises(FileNotFoundError):
        backend.mark_block_compacted(uuid.uuid4(), "t")