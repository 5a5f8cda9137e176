"""CLI command implementations."""

from .audio import audio_group
from .export import export
from .pads import pads_group
from .record import record
from .reset import reset
from .seq import seq_group

__all__ = [
    "audio_group",
    "export",
    "pads_group",
    "record",
    "reset",
    "seq_group",
]
