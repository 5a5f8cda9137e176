"""Data models for the soundboard."""

from .config import AppConfig
from .enums import RecorderState
from .layout import (
    DEFAULT_BPM,
    DEFAULT_PAD_NAME,
    DEFAULT_VOLUME,
    MAX_BPM,
    MIN_BPM,
    NUM_PADS,
    NUM_STEPS,
    PAD_KEYS,
    clamp_bpm,
    empty_grid,
    index_for_key,
    key_for_index,
)
from .pad import Pad
from .snapshot import PadRecord, Snapshot

__all__ = [
    "DEFAULT_BPM",
    "DEFAULT_PAD_NAME",
    "DEFAULT_VOLUME",
    "MAX_BPM",
    "MIN_BPM",
    "NUM_PADS",
    "NUM_STEPS",
    "PAD_KEYS",
    # Models
    "AppConfig",
    "Pad",
    "PadRecord",
    # Enums
    "RecorderState",
    "Snapshot",
    "clamp_bpm",
    "empty_grid",
    "index_for_key",
    "key_for_index",
]
