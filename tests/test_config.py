from datetime import timedelta

import pytest
import yaml

from tempodb.config import CompactorConfig

FULL = {
    "chunk_size_bytes": 10,
    "flush_size_bytes": 1_000_000,
    "compaction_window": "24h",
    "max_compaction_objects": 1000,
    "max_block_bytes": 1024 * 1024 * 1024,
    "block_retention": "0",
    "compacted_block_retention": "1h",
    "retention_concurrency": 10,
    "iterator_buffer_size": 1000,
}


def test_from_dict_reads_every_field():
    cfg = CompactorConfig.from_dict(FULL)
    assert cfg.chunk_size_bytes == FULL["chunk_size_bytes"]
    assert cfg.flush_size_bytes == FULL["flush_size_bytes"]
    assert cfg.max_compaction_range == timedelta(hours=24)
    assert cfg.max_compaction_objects == FULL["max_compaction_objects"]
    assert cfg.max_block_bytes == FULL["max_block_bytes"]
    assert cfg.block_retention == timedelta(0)
    assert cfg.compacted_block_retention == timedelta(hours=1)
    assert cfg.retention_concurrency == FULL["retention_concurrency"]
    assert cfg.iterator_buffer_size == FULL["iterator_buffer_size"]


def test_yaml_matches_dict():
    assert CompactorConfig.from_yaml(yaml.safe_dump(FULL)) == CompactorConfig.from_dict(FULL)


def test_empty_document_gives_defaults():
    assert CompactorConfig.from_yaml("") == CompactorConfig()
    assert CompactorConfig.from_dict({}) == CompactorConfig()


def test_missing_keys_keep_defaults():
    cfg = CompactorConfig.from_dict({"chunk_size_bytes": 5})
    assert cfg == CompactorConfig(chunk_size_bytes=5)


def test_equivalent_durations_agree():
    a = CompactorConfig.from_dict({"compaction_window": "1.5h"})
    b = CompactorConfig.from_dict({"compaction_window": "90m"})
    c = CompactorConfig.from_dict({"compaction_window": "1h30m"})
    assert a.max_compaction_range == b.max_compaction_range == c.max_compaction_range


def test_timedelta_values_pass_through():
    window = timedelta(hours=6)
    cfg = CompactorConfig.from_dict({"compaction_window": window})
    assert cfg.max_compaction_range == window


@pytest.mark.parametrize("bad", ["", "abc", "5", "1x", "h"])
def test_invalid_duration_raises(bad):
    with pytest.raises(ValueError):
        CompactorConfig.from_dict({"compaction_window": bad})


def test_negative_unsigned_value_raises():
    with pytest.raises(ValueError):
        CompactorConfig.from_dict({"max_block_bytes": -1})


def test_non_integer_value_raises():
    with pytest.raises(ValueError):
        CompactorConfig.from_dict({"chunk_size_bytes": "many"})


def test_non_mapping_document_raises():
    with pytest.raises(ValueError):
        CompactorConfig.from_yaml("- a\n- b\n")