"""Observer protocol definitions for domain events.

This module contains observer protocols for the domain:
- State observers: React to playback activity pulses
- Edit observers: React to pad mutations
- Sequencer observers: React to grid, tempo and step changes
- Recorder observers: React to capture session changes
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from soundsprite.models import Pad

from .events import EditEvent, PlaybackEvent, RecorderEvent, SequencerEvent


@runtime_checkable
class StateObserver(Protocol):
    """
    Observer that receives audio activity events.

    Any object implementing this protocol can drive a pad highlight
    without coupling to the audio engine.
    """

    def on_playback_event(self, event: PlaybackEvent, pad_index: int) -> None:
        """
        Handle activity changes.

        Args:
            event: The type of playback event
            pad_index: Index of the pad (0-8)

        Note:
            PAD_PULSE_ENDED is delivered from a timer thread, so
            implementations should be thread-safe and avoid blocking.
        """
        ...


@runtime_checkable
class EditObserver(Protocol):
    """
    Observer that receives pad edit events.

    The soundboard registers one to auto-save after every mutation.
    """

    def on_edit_event(self, event: EditEvent, pad_indices: list[int], pads: list["Pad"]) -> None:
        """
        Handle editing events.

        Args:
            event: The type of editing event
            pad_indices: List of affected pad indices
            pads: List of affected pad states (post-edit copies)

        Error Handling:
            Exceptions raised by observers are caught and logged. They do
            not propagate to the caller.
        """
        ...


@runtime_checkable
class SequencerObserver(Protocol):
    """Observer that receives sequencer events."""

    def on_sequencer_event(self, event: SequencerEvent, **kwargs: Any) -> None:
        """
        Handle sequencer events.

        Args:
            event: The type of sequencer event
            **kwargs: Event details (`pad`, `step`, `value`, `bpm`)
        """
        ...


@runtime_checkable
class RecorderObserver(Protocol):
    """Observer that receives recorder events."""

    def on_recorder_event(self, event: RecorderEvent, **kwargs: Any) -> None:
        """
        Handle recorder events.

        Args:
            event: The type of recorder event
            **kwargs: Event details (`state`, `target_index`, `pad`, `error`)
        """
        ...
