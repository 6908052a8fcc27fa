# tempodb

Building blocks for storing trace data in blocks:

- block metadata and its JSON form (`tempodb.block_meta`)
- compression encoding names (`tempodb.encoding`)
- backend interfaces and errors (`tempodb.backend`)
- a backend on the local filesystem (`tempodb.local`)
- a read cache in front of any backend (`tempodb.cache`)
- the time-window selector that picks blocks to compact together (`tempodb.block_selector`)
- compaction helpers and counters (`tempodb.compaction`)
- compactor configuration (`tempodb.config`)
- object naming helpers (`tempodb.util`) and in-memory test doubles (`tempodb.mocks`)

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Encodings

`Encoding` is an `IntEnum` whose numeric values are fixed. Its text names are
`none`, `gzip`, `lz4-64k`, `lz4-256k`, `lz4-1M`, `lz4` (for `LZ4_4M`),
`snappy` and `zstd`.

```python
from tempodb.encoding import Encoding, parse_encoding, supported_encoding_string

str(Encoding.LZ4_4M)             # "lz4"
parse_encoding("LZ4-1m")         # Encoding.LZ4_1M, case is ignored
Encoding.ZSTD.to_json()          # '"zstd"'
Encoding.from_yaml("gzip")       # Encoding.GZIP
supported_encoding_string()      # "none, gzip, lz4-64k, ..."
```

An unknown name raises `ValueError` listing the supported names.

## Block metadata

```python
import uuid
from tempodb.block_meta import BlockMeta, new_block_meta
from tempodb.encoding import Encoding

meta = new_block_meta("tenant-a", uuid.uuid4(), "v2", Encoding.ZSTD, "")
meta.object_added(b"\x00\x02")
meta.object_added(b"\x00\x01")
meta.min_id, meta.max_id, meta.total_objects   # b"\x00\x01", b"\x00\x02", 2

text = meta.to_json()
same = BlockMeta.from_json(text)
```

`object_added` moves `end_time` to now and widens the id range. The JSON keys
are those of a block's `meta.json` (`format`, `blockID`, `minID`, `maxID`,
`tenantID`, `startTime`, `endTime`, `totalObjects`, `size`,
`compactionLevel`, `encoding`, `indexPageSize`, `totalRecords`,
`dataEncoding`, `bloomShards`); ids are base64 and times RFC 3339. Missing
keys take their defaults.

`CompactedBlockMeta` adds `compacted_time`, which is not stored in the file:
`CompactedBlockMeta.from_json(text, compacted_time)`.

## Backend interfaces

`tempodb.backend` defines the abstract `Reader`, `Writer` and `Compactor`
classes, and the errors `BackendError`, `MetaDoesNotExistError`,
`EmptyTenantIDError`, `EmptyBlockIDError` and `UnsupportedError`.

`ContextReader` gives access to a single object:

- `BackendContextReader(meta, name, reader)` reads one named object of a
  block through a `Reader`; `reader()` raises `UnsupportedError`.
- `StreamContextReader(stream)` wraps a seekable binary stream; `read_at`
  raises `EOFError` when fewer bytes are available than asked for.

## Local backend

```python
from tempodb.local import LocalBackend, LocalConfig

store = LocalBackend(LocalConfig(path="/var/lib/traces"))
store.write_block_meta(meta)
store.write("data", meta.block_id, meta.tenant_id, b"payload")

store.read("data", meta.block_id, meta.tenant_id)               # b"payload"
store.read_range("data", meta.block_id, meta.tenant_id, 2, 3)   # b"ylo"
store.tenants()                                                 # ["tenant-a"]
store.blocks("tenant-a")                                        # [meta.block_id]

store.mark_block_compacted(meta.block_id, meta.tenant_id)
store.compacted_block_meta(meta.block_id, meta.tenant_id)
store.clear_block(meta.block_id, meta.tenant_id)
```

Each block is the directory `path/<tenant>/<block-id>`, holding its objects,
`meta.json` and, once compacted, `meta.compacted.json` (a rename of
`meta.json`). `tenants()` and `blocks()` return sorted results; folders that
are not block ids are skipped with a logged warning. A missing meta raises
`MetaDoesNotExistError`. `read_range` raises `EOFError` on a short read.
`append` returns an open file to pass back on later calls and to
`close_append`. `read_reader` returns an open file and its size.
`clear_block` raises `EmptyTenantIDError` or `EmptyBlockIDError` for an empty
tenant or the nil block id.

## Caching reads

`CachedReaderWriter(next_reader, next_writer, cache)` puts a `Cache` (with
`fetch`, `store` and `stop`) in front of whole-object `read` and `write`.
Everything else passes straight through; `read_reader` raises
`UnsupportedError`. Keys come from `cache_key(block_id, tenant_id, name)`.

```python
from tempodb.cache import Cache, CachedReaderWriter

class DictCache(Cache):
    def __init__(self):
        self.items = {}

    def store(self, keys, bufs):
        self.items.update(zip(keys, bufs))

    def fetch(self, keys):
        found = [k for k in keys if k in self.items]
        return found, [self.items[k] for k in found], [k for k in keys if k not in self.items]

    def stop(self):
        self.items.clear()

cached = CachedReaderWriter(store, store, DictCache())
cached.read("data", meta.block_id, meta.tenant_id)
```

## Choosing blocks to compact

```python
from datetime import timedelta
from tempodb.block_selector import TimeWindowBlockSelector

blocklist = [store.block_meta(b, "tenant-a") for b in store.blocks("tenant-a")]
selector = TimeWindowBlockSelector(
    blocklist,
    timedelta(hours=1),   # compaction window
    100_000,              # max objects in one compaction
    100 * 1024 ** 3,      # max bytes in one compaction
    2,                    # min input blocks
    8,                    # max input blocks
)
while True:
    blocks, shard_hash = selector.blocks_to_compact()
    if not blocks:
        break
    ...
```

Blocks whose end time is within the last 24 hours are grouped by compaction
level and window, smallest first; older blocks are grouped by window only,
lowest level and smallest first. Blocks in the window at the boundary are
never selected. A group is only taken with matching data encodings and
within the block, object and byte limits. When nothing is left,
`blocks_to_compact()` returns `(None, "")`. Pass `now=` to fix the current
time; a window shorter than one second raises `ValueError`.

## Compaction helpers

```python
from tempodb.compaction import InstrumentedObjectCombiner, compaction_level_for_blocks

combiner = InstrumentedObjectCombiner(my_combiner, "0")
combiner.combine(obj_a, obj_b, "")
combiner.metrics.objects_combined("0")

compaction_level_for_blocks(blocks)   # highest level, 0 for none
```

`CompactionMetrics` holds counters keyed by level label. The module also
defines `INPUT_BLOCKS`, `OUTPUT_BLOCKS`, `COMPACTION_CYCLE`,
`DEFAULT_FLUSH_SIZE_BYTES` and `DEFAULT_ITERATOR_BUFFER_SIZE`.

## Compactor configuration

```python
from tempodb.config import CompactorConfig

cfg = CompactorConfig.from_yaml("""
compaction_window: 1h
max_compaction_objects: 6000000
max_block_bytes: 107374182400
block_retention: 336h
""")
cfg.max_compaction_range   # timedelta(hours=1)
```

Durations are written like `1h30m` or `250ms`; a bare integer is taken as
nanoseconds. Unknown keys are ignored; a wrong type or an out-of-range value
raises `ValueError`.

## Naming helpers and test doubles

`tempodb.util` builds object names: `root_path`, `meta_file_name`,
`object_file_name`, `compacted_meta_file_name`, and `file_exists`.

`tempodb.mocks` has `MockReader`, which returns the values it was built with,
and `MockWriter`, which stores nothing and records each call in `calls`.

## What this package does not do

- It has no cloud storage backends; the local filesystem is the only one.
- It does not run compactions: it chooses which blocks to compact, but it
  cannot read block contents, merge them or write new blocks.
- It has no write-ahead log, no block data or index format, no bloom filters
  and no trace lookup.
- It has no command line and no server.