"""Compaction helpers: level bookkeeping, metrics and object combining."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable

from tempodb.block_meta import BlockMeta

INPUT_BLOCKS = 2
OUTPUT_BLOCKS = 1

COMPACTION_CYCLE = timedelta(seconds=30)

DEFAULT_FLUSH_SIZE_BYTES = 30 * 1024 * 1024  # 30 MiB
DEFAULT_ITERATOR_BUFFER_SIZE = 1000


class ObjectCombiner(ABC):
    """Merges two objects that share an id."""

    @abstractmethod
    def combine(self, obj_a: bytes, obj_b: bytes, data_encoding: str) -> tuple[bytes, bool]:
        """Return the merged object and whether the two were actually combined."""


@dataclass
class CompactionMetrics:
    """Counters kept during compaction, keyed by compaction level label."""

    blocks: Counter = field(default_factory=Counter)
    objects_written: Counter = field(default_factory=Counter)
    bytes_written: Counter = field(default_factory=Counter)
    combined: Counter = field(default_factory=Counter)
    errors: int = 0

    def objects_combined(self, level: str) -> int:
        """Return how many objects were combined at the given level."""
        return self.combined[level]


class InstrumentedObjectCombiner(ObjectCombiner):
    """Wraps a combiner and counts the objects it combines."""

    def __init__(
        self,
        inner: ObjectCombiner,
        compaction_level_label: str,
        metrics: CompactionMetrics | None = None,
    ) -> None:
        self.inner = inner
        self.compaction_level_label = compaction_level_label
        self.metrics = metrics if metrics is not None else CompactionMetrics()

    def combine(self, obj_a: bytes, obj_b: bytes, data_encoding: str) -> tuple[bytes, bool]:
        merged, was_combined = self.inner.combine(obj_a, obj_b, data_encoding)
        if was_combined:
            self.metrics.combined[self.compaction_level_label] += 1
        return merged, was_combined


def compaction_level_for_blocks(block_metas: Iterable[BlockMeta]) -> int:
    """Return the highest compaction level among the blocks, or 0."""
    return max((meta.compaction_level for meta in block_metas), default=0)