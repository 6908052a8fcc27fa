"""Choosing which blocks of a tenant to compact together."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from tempodb.block_meta import BlockMeta

ACTIVE_WINDOW_DURATION = timedelta(hours=24)
DEFAULT_MIN_INPUT_BLOCKS = 2
DEFAULT_MAX_INPUT_BLOCKS = 8

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_SECOND = timedelta(seconds=1)


class CompactionBlockSelector(ABC):
    """Picks groups of blocks that are suitable for compacting together."""

    @abstractmethod
    def blocks_to_compact(self) -> tuple[list[BlockMeta] | None, str]:
        """Return the next blocks to compact and their sharding hash.

        Returns ``(None, "")`` once nothing is left to compact.
        """


@dataclass
class _Entry:
    meta: BlockMeta
    group: str  # blocks in the same group are compacted together; sort order is priority
    order: str  # priority of the block within its group
    hash: str  # string used for sharding ownership


def _unix_seconds(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // _SECOND


def _truncating_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _total_objects(entries: Iterable[_Entry]) -> int:
    return sum(entry.meta.total_objects for entry in entries)


def _total_size(entries: Iterable[_Entry]) -> int:
    return sum(entry.meta.size for entry in entries)


class TimeWindowBlockSelector(CompactionBlockSelector):
    """Groups blocks by time window and compaction level.

    Blocks inside the active window are grouped by level and window; older
    blocks by window only. Blocks in the window at the active/inactive
    cut-over are never chosen, so that two compactors cannot claim the same
    block while it changes sides. A selector is meant to be used once per
    time slot and rebuilt with a fresh blocklist afterwards.
    """

    def __init__(
        self,
        blocklist: Sequence[BlockMeta] | None,
        max_compaction_range: timedelta,
        max_compaction_objects: int,
        max_block_bytes: int,
        min_input_blocks: int = DEFAULT_MIN_INPUT_BLOCKS,
        max_input_blocks: int = DEFAULT_MAX_INPUT_BLOCKS,
        now: datetime | None = None,
    ) -> None:
        window_seconds = max_compaction_range // _SECOND
        if window_seconds <= 0:
            raise ValueError("max_compaction_range must be at least one second")

        self.min_input_blocks = min_input_blocks
        self.max_input_blocks = max_input_blocks
        self.max_compaction_range = max_compaction_range
        self.max_compaction_objects = max_compaction_objects
        self.max_block_bytes = max_block_bytes
        self._window_seconds = window_seconds

        if now is None:
            now = datetime.now(timezone.utc)
        current_window = self._window_for_time(now)
        active_window = self._window_for_time(now - ACTIVE_WINDOW_DURATION)

        entries: list[_Entry] = []
        for meta in blocklist or ():
            window = self._window_for_time(meta.end_time)
            if window == active_window:
                continue

            age = current_window - window
            level = meta.compaction_level
            if active_window <= window:
                # Lowest level and most recent windows first, smallest blocks first within.
                group = f"A-{level}-{age:016X}"
                order = f"{meta.total_objects:016X}"
                hash_string = f"{meta.tenant_id}-{level}-{window}"
            else:
                # Most recent windows first; lowest level and smallest blocks within.
                group = f"B-{age:016X}"
                order = f"{level}-{meta.total_objects:016X}"
                hash_string = f"{meta.tenant_id}-{window}"
            entries.append(_Entry(meta, group, order, hash_string))

        entries.sort(key=lambda entry: (entry.group, entry.order))
        self._entries = entries

    def _window_for_time(self, moment: datetime) -> int:
        return _truncating_div(_unix_seconds(moment), self._window_seconds)

    def _fits(self, first: _Entry, last: _Entry, stripe: Sequence[_Entry]) -> bool:
        return (
            first.group == last.group
            and first.meta.data_encoding == last.meta.data_encoding
            and len(stripe) <= self.max_input_blocks
            and _total_objects(stripe) <= self.max_compaction_objects
            and _total_size(stripe) <= self.max_block_bytes
        )

    def blocks_to_compact(self) -> tuple[list[BlockMeta] | None, str]:
        while self._entries:
            entries = self._entries
            chosen: list[_Entry] = []
            start = len(entries)

            # Gather the first contiguous stripe of the same group within limits.
            for index, first in enumerate(entries):
                for end in range(index + 1, len(entries)):
                    stripe = entries[index : end + 1]
                    if not self._fits(first, entries[end], stripe):
                        break
                    chosen = stripe
                if chosen:
                    start = index
                    break

            # Entries examined so far are not considered again.
            self._entries = entries[start + len(chosen) :]

            if chosen and len(chosen) >= self.min_input_blocks:
                return [entry.meta for entry in chosen], chosen[0].hash
        return None, ""


def block_ids(metas: Iterable[BlockMeta]) -> list[uuid.UUID]:
    """Return the ids of the given blocks, in order."""
    return [meta.block_id for meta in metas]