"""Activity tracker for pad highlight pulses."""

import logging
import threading
from threading import Lock

from ..protocols import PlaybackEvent, StateObserver
from ..utils import ObserverManager

logger = logging.getLogger(__name__)

DEFAULT_PULSE_DURATION = 0.22


class PadActivityStateMachine:
    """
    Tracks which pads are visibly "active" and dispatches events to observers.

    Each trigger starts (or extends) a fixed-length pulse. A retrigger
    within the pulse restarts it, so only the last trigger's timer ends
    the pulse.

    Thread Safety:
        Triggers may arrive from the event loop or the sequencer; pulse ends
        fire on timer threads. Observers are notified after the lock is
        released.
    """

    def __init__(self, pulse_duration: float = DEFAULT_PULSE_DURATION) -> None:
        self.pulse_duration = pulse_duration
        self._lock = Lock()
        self._active_pads: set[int] = set()
        self._generations: dict[int, int] = {}
        self._timers: dict[int, threading.Timer] = {}
        # ObserverManager has its own lock - don't share to avoid deadlock when notifying while holding _lock
        self._observers = ObserverManager[StateObserver](observer_type_name="state")

    def register_observer(self, observer: StateObserver) -> None:
        """Register an observer to receive activity events."""
        self._observers.register(observer)

    def unregister_observer(self, observer: StateObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def notify_pad_triggered(self, pad_index: int) -> None:
        """
        Start or extend the activity pulse for a pad.

        Args:
            pad_index: Index of triggered pad
        """
        with self._lock:
            generation = self._generations.get(pad_index, 0) + 1
            self._generations[pad_index] = generation
            self._active_pads.add(pad_index)

            previous = self._timers.pop(pad_index, None)
            if previous is not None:
                previous.cancel()

            if self.pulse_duration > 0:
                timer = threading.Timer(
                    self.pulse_duration, self._end_pulse, args=(pad_index, generation)
                )
                timer.daemon = True
                self._timers[pad_index] = timer
                timer.start()

        self._observers.notify("on_playback_event", PlaybackEvent.PAD_TRIGGERED, pad_index)

        if self.pulse_duration <= 0:
            self._end_pulse(pad_index, generation)

    def _end_pulse(self, pad_index: int, generation: int) -> None:
        with self._lock:
            # A newer trigger owns the pulse now
            if self._generations.get(pad_index) != generation:
                return
            self._active_pads.discard(pad_index)
            self._timers.pop(pad_index, None)

        self._observers.notify("on_playback_event", PlaybackEvent.PAD_PULSE_ENDED, pad_index)

    def is_pad_active(self, pad_index: int) -> bool:
        """Check whether a pad's pulse is currently showing."""
        with self._lock:
            return pad_index in self._active_pads

    def get_active_pads(self) -> list[int]:
        """Get the indices of all pads with a running pulse."""
        with self._lock:
            return sorted(self._active_pads)

    def shutdown(self) -> None:
        """Cancel pending pulse timers without notifying."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            self._active_pads.clear()
