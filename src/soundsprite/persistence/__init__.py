"""Persistence: the key-value store, snapshot codec and sample export."""

from .codec import STORAGE_KEY, SnapshotCodec
from .export import export_all, export_filename, export_pad
from .store import KeyValueStore, StoreCorruptedError

__all__ = [
    "STORAGE_KEY",
    "KeyValueStore",
    "SnapshotCodec",
    "StoreCorruptedError",
    "export_all",
    "export_filename",
    "export_pad",
]
