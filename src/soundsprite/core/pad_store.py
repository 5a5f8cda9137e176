"""The 9-slot pad bank."""

import logging
import math
from threading import RLock
from typing import Any, Optional

from ..audio.data import AudioData
from ..models import DEFAULT_PAD_NAME, DEFAULT_VOLUME, NUM_PADS, Pad
from ..protocols import EditEvent, EditObserver
from ..utils import ObserverManager

logger = logging.getLogger(__name__)


def normalize_name(name: Optional[str]) -> str:
    """Trim a display name; blank names become the empty pad name."""
    trimmed = (name or "").strip()
    return trimmed or DEFAULT_PAD_NAME


def percent_to_gain(percent: Any) -> float:
    """
    Convert a slider percent (0-100, may exceed 100) to a linear gain.

    Non-numeric and non-finite input maps to unity gain; negatives clamp to 0.
    """
    try:
        value = float(percent)
    except (TypeError, ValueError):
        return DEFAULT_VOLUME
    if not math.isfinite(value):
        return DEFAULT_VOLUME
    return max(0.0, value / 100.0)


class PadStore:
    """
    Owns the pad bank and every mutation of it.

    Event-Driven Architecture:
        Each mutation emits an EditEvent to registered observers after the
        store lock is released, so the soundboard can auto-save without
        re-entering the store while it is being modified.

    Threading:
        Mutations are serialized by a re-entrant lock. A recorder commit and
        a name edit on another pad can interleave freely; each is applied
        whole.
    """

    def __init__(self, num_pads: int = NUM_PADS):
        self._pads: list[Pad] = [Pad.empty() for _ in range(num_pads)]
        self._lock = RLock()
        self._observers = ObserverManager[EditObserver](observer_type_name="edit")

    @property
    def size(self) -> int:
        return len(self._pads)

    # =================================================================
    # Event System
    # =================================================================

    def register_observer(self, observer: EditObserver) -> None:
        """Register an observer to receive edit events."""
        self._observers.register(observer)

    def unregister_observer(self, observer: EditObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _notify_observers(self, event: EditEvent, pad_indices: list[int], pads: list[Pad]) -> None:
        self._observers.notify("on_edit_event", event, pad_indices, pads)

    def _validate_index(self, index: int) -> None:
        """
        Raises:
            IndexError: If index is out of range (never clamped)
        """
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < self.size:
            raise IndexError(f"Pad index {index} out of range (0-{self.size - 1})")

    # =================================================================
    # Reads
    # =================================================================

    def get(self, index: int) -> Pad:
        """Get a copy of one pad; mutating it does not affect the store."""
        self._validate_index(index)
        with self._lock:
            return self._pads[index].model_copy()

    @property
    def pads(self) -> list[Pad]:
        """Copies of all pads, in index order."""
        with self._lock:
            return [pad.model_copy() for pad in self._pads]

    # =================================================================
    # Mutations
    # =================================================================

    def set_name(self, index: int, name: Optional[str]) -> Pad:
        """Rename a pad (trimmed; blank becomes "Empty")."""
        self._validate_index(index)
        with self._lock:
            pad = self._pads[index].model_copy(update={"name": normalize_name(name)})
            self._pads[index] = pad
        logger.debug(f"Pad {index} renamed to '{pad.name}'")
        self._notify_observers(EditEvent.PAD_NAME_CHANGED, [index], [pad.model_copy()])
        return pad.model_copy()

    def set_volume(self, index: int, percent: Any) -> Pad:
        """Set a pad's gain from a slider percent (50 -> 0.5)."""
        self._validate_index(index)
        with self._lock:
            pad = self._pads[index].model_copy(update={"volume": percent_to_gain(percent)})
            self._pads[index] = pad
        logger.debug(f"Pad {index} volume set to {pad.volume:.2f}")
        self._notify_observers(EditEvent.PAD_VOLUME_CHANGED, [index], [pad.model_copy()])
        return pad.model_copy()

    def commit(
        self,
        index: int,
        buffer: Optional[AudioData],
        encoded_sample: Optional[str],
        name: Optional[str],
        volume: Optional[float] = None,
    ) -> Pad:
        """
        Atomically replace a pad's audio, encoding and name.

        Used by the recorder (new take) and by rehydration (restored take,
        where `volume` is also restored and `buffer` may be None when the
        stored encoding failed to decode).
        """
        self._validate_index(index)
        with self._lock:
            current = self._pads[index]
            pad = Pad(
                name=normalize_name(name),
                buffer=buffer,
                volume=current.volume if volume is None else max(0.0, float(volume)),
                encoded_sample=encoded_sample,
            )
            self._pads[index] = pad
        logger.info(f"Committed pad {index} ('{pad.name}', playable={pad.is_playable})")
        self._notify_observers(EditEvent.PAD_COMMITTED, [index], [pad.model_copy()])
        return pad.model_copy()

    def clear(self, index: int) -> Pad:
        """Reset one pad to the default empty pad."""
        self._validate_index(index)
        with self._lock:
            self._pads[index] = Pad.empty()
        logger.info(f"Cleared pad {index}")
        self._notify_observers(EditEvent.PAD_CLEARED, [index], [Pad.empty()])
        return Pad.empty()

    def reset_all(self) -> None:
        """Clear every pad; observers use PADS_RESET to invalidate the saved snapshot."""
        with self._lock:
            self._pads = [Pad.empty() for _ in range(self.size)]
            pads = [pad.model_copy() for pad in self._pads]
        logger.info("All pads reset")
        self._notify_observers(EditEvent.PADS_RESET, list(range(self.size)), pads)
