"""Events and observer protocols for the soundboard domain."""

from .events import EditEvent, PlaybackEvent, RecorderEvent, SequencerEvent
from .observers import EditObserver, RecorderObserver, SequencerObserver, StateObserver

__all__ = [
    # Events
    "EditEvent",
    "PlaybackEvent",
    "RecorderEvent",
    "SequencerEvent",
    # Observers
    "EditObserver",
    "RecorderObserver",
    "SequencerObserver",
    "StateObserver",
]
