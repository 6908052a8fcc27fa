import io
import uuid

import pytest

from tempodb.backend import UnsupportedError
from tempodb.block_meta import BlockMeta
from tempodb.mocks import MockReader, MockWriter

BLOCK_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


def test_reader_returns_configured_values():
    meta = BlockMeta(tenant_id="t")
    reader = MockReader(tenant_ids=["1"], block_ids=[BLOCK_ID], meta=meta, data=b"\x02")
    assert reader.tenants() == ["1"]
    assert reader.blocks("t") == [BLOCK_ID]
    assert reader.block_meta(BLOCK_ID, "t") is meta
    assert reader.read("obj", BLOCK_ID, "t") == b"\x02"


def test_reader_read_fn_overrides_data():
    reader = MockReader(data=b"plain", read_fn=lambda name, block_id, tenant: name.encode())
    assert reader.read("custom", BLOCK_ID, "t") == b"custom"


def test_read_range_truncates():
    reader = MockReader(range_data=b"abcdef")
    assert reader.read_range("obj", BLOCK_ID, "t", 0, 2) == b"ab"


def test_read_range_pads_with_zeros():
    reader = MockReader(range_data=b"\x01\x02")
    assert reader.read_range("obj", BLOCK_ID, "t", 0, 4) == b"\x01\x02\x00\x00"


def test_read_reader_unsupported():
    with pytest.raises(UnsupportedError):
        MockReader().read_reader("obj", BLOCK_ID, "t")


def test_writer_records_calls():
    writer = MockWriter()
    meta = BlockMeta()
    writer.write("obj", BLOCK_ID, "t", b"data")
    writer.write_reader("big", BLOCK_ID, "t", io.BytesIO(b"xyz"), 3)
    writer.write_block_meta(meta)
    tracker = writer.append("obj", BLOCK_ID, "t", None, b"more")
    writer.close_append(tracker)
    assert [call[0] for call in writer.calls] == [
        "write",
        "write_reader",
        "write_block_meta",
        "append",
        "close_append",
    ]
    assert writer.calls[0] == ("write", "obj", BLOCK_ID, "t", b"data")
    assert writer.calls[2][1] is meta
    assert tracker is None