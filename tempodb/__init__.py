"""Trace block storage: metadata, encodings, a local backend, a read cache and compaction selection."""

__version__ = "0.1.0"