import io
import uuid

import pytest

from tempodb.backend import (
    BackendContextReader,
    BackendError,
    EmptyBlockIDError,
    EmptyTenantIDError,
    MetaDoesNotExistError,
    Reader,
    StreamContextReader,
    UnsupportedError,
)
from tempodb.block_meta import BlockMeta
from tempodb.mocks import MockReader


def test_error_messages():
    assert str(MetaDoesNotExistError()) == "meta does not exist"
    assert str(EmptyTenantIDError()) == "empty tenant id"
    assert str(EmptyBlockIDError()) == "empty block id"


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (MetaDoesNotExistError(), "meta does not exist"),
        (EmptyTenantIDError(), "empty tenant id"),
        (EmptyBlockIDError(), "empty block id"),
    ],
)
def test_errors_share_base(error, message):
    assert isinstance(error, BackendError)
    assert str(error) == message


def test_reader_is_abstract():
    with pytest.raises(TypeError):
        Reader()


def test_backend_context_reader_read_all_passes_identity():
    meta = BlockMeta(block_id=uuid.uuid4(), tenant_id="tenant")
    seen = []

    def read_fn(name, block_id, tenant_id):
        seen.append((name, block_id, tenant_id))
        return b"payload"

    reader = BackendContextReader(meta, "data", MockReader(read_fn=read_fn))
    assert reader.read_all() == b"payload"
    assert seen == [("data", meta.block_id, "tenant")]


def test_backend_context_reader_read_at():
    meta = BlockMeta(block_id=uuid.uuid4(), tenant_id="tenant")
    reader = BackendContextReader(meta, "data", MockReader(range_data=b"abcdef"))
    assert reader.read_at(3, 0) == b"abc"


def test_backend_context_reader_has_no_stream():
    reader = BackendContextReader(BlockMeta(), "data", MockReader())
    with pytest.raises(UnsupportedError):
        reader.reader()


def test_stream_context_reader_read_at_keeps_position():
    data = b"0123456789"
    stream = io.BytesIO(data)
    stream.seek(1)
    reader = StreamContextReader(stream)
    assert reader.read_at(3, 2) == data[2:5]
    assert stream.tell() == 1


def test_stream_context_reader_short_read():
    reader = StreamContextReader(io.BytesIO(b"abc"))
    with pytest.raises(EOFError):
        reader.read_at(5, 1)


def test_stream_context_reader_read_all_and_stream():
    stream = io.BytesIO(b"hello")
    reader = StreamContextReader(stream)
    assert reader.reader() is stream
    assert reader.read_all() == b"hello"