"""Four-step loop sequencer driven by an asyncio task."""

import asyncio
import logging
import math
import time
from typing import TYPE_CHECKING, Any, Optional

from ..models import DEFAULT_BPM, NUM_PADS, NUM_STEPS, clamp_bpm, empty_grid
from ..models.snapshot import normalize_grid
from ..protocols import SequencerEvent, SequencerObserver
from ..utils import ObserverManager
from .pad_store import PadStore

if TYPE_CHECKING:
    from ..audio.engine import AudioEngine

logger = logging.getLogger(__name__)


def step_interval(bpm: int) -> float:
    """Seconds between steps (one step per beat)."""
    return 60.0 / bpm


class Sequencer:
    """
    Pad x step grid with a tempo and a running transport.

    `start()` plays step 0 immediately and then arms a task that fires one
    step per beat against a `time.perf_counter` deadline, so timing error
    does not accumulate from tick to tick. At most one tick task exists;
    stopping cancels it and no further ticks fire.

    `current_step` is the step the next tick will play.
    """

    def __init__(self, engine: "AudioEngine", pad_store: PadStore, bpm: int = DEFAULT_BPM):
        self._engine = engine
        self._pad_store = pad_store
        self._grid = empty_grid()
        self.default_bpm = clamp_bpm(bpm)
        self._bpm = self.default_bpm
        self._current_step = 0
        self._task: Optional[asyncio.Task] = None
        self._observers = ObserverManager[SequencerObserver](observer_type_name="sequencer")

    # =================================================================
    # State
    # =================================================================

    @property
    def grid(self) -> list[list[bool]]:
        """Copy of the grid, indexed [pad][step]."""
        return [list(row) for row in self._grid]

    @property
    def bpm(self) -> int:
        return self._bpm

    @property
    def interval(self) -> float:
        """Seconds per step at the current tempo."""
        return step_interval(self._bpm)

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def is_playing(self) -> bool:
        return self._task is not None

    def register_observer(self, observer: SequencerObserver) -> None:
        """Register an observer to receive sequencer events."""
        self._observers.register(observer)

    def unregister_observer(self, observer: SequencerObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _notify(self, event: SequencerEvent, **kwargs: Any) -> None:
        self._observers.notify("on_sequencer_event", event, **kwargs)

    @staticmethod
    def _validate_cell(pad: int, step: int) -> None:
        for value, size, label in ((pad, NUM_PADS, "Pad"), (step, NUM_STEPS, "Step")):
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value < size:
                raise IndexError(f"{label} index {value!r} out of range (0-{size - 1})")

    # =================================================================
    # Editing
    # =================================================================

    def toggle(self, pad: int, step: int) -> bool:
        """
        Flip one grid cell.

        Returns:
            The new value of the cell

        Raises:
            IndexError: If pad or step is out of range
        """
        self._validate_cell(pad, step)
        value = not self._grid[pad][step]
        self._grid[pad][step] = value
        logger.debug(f"Cell (pad={pad}, step={step}) -> {value}")
        self._notify(SequencerEvent.CELL_TOGGLED, pad=pad, step=step, value=value)
        return value

    def set_tempo(self, bpm: Any) -> int:
        """
        Change the tempo (clamped to the supported range).

        While playing, the tick task is cancelled and the loop restarts at
        step 0 at the new interval.

        Returns:
            The tempo now in effect

        Raises:
            ValueError: If bpm is not a finite number
        """
        try:
            value = float(bpm)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid tempo: {bpm!r}") from e
        if not math.isfinite(value):
            raise ValueError(f"Invalid tempo: {bpm!r}")

        self._bpm = clamp_bpm(round(value))
        logger.info(f"Tempo set to {self._bpm} bpm")
        self._notify(SequencerEvent.TEMPO_CHANGED, bpm=self._bpm)

        if self.is_playing:
            self._cancel_task()
            self._start_transport()
        return self._bpm

    def clear_grid(self) -> None:
        """Turn every cell off; tempo and transport are unchanged."""
        self._grid = empty_grid()
        logger.info("Sequencer grid cleared")
        self._notify(SequencerEvent.GRID_CLEARED)

    def restore(self, grid: list[list[bool]], bpm: int) -> None:
        """Load a saved grid and tempo (used when rehydrating)."""
        self._grid = normalize_grid([[bool(cell) for cell in row] for row in grid])
        self._bpm = clamp_bpm(bpm or self.default_bpm)
        logger.debug(f"Sequencer restored ({self._bpm} bpm)")

    def reset(self) -> None:
        """Clear the grid and return to the default tempo (transport keeps its state)."""
        self._grid = empty_grid()
        self._bpm = self.default_bpm
        if self.is_playing:
            self._cancel_task()
            self._start_transport()
        self._notify(SequencerEvent.RESET, bpm=self._bpm)

    # =================================================================
    # Transport
    # =================================================================

    def start(self) -> None:
        """
        Start the loop at step 0. No-op if already playing.

        Must be called with a running event loop.
        """
        if self.is_playing:
            return
        self._start_transport()
        logger.info(f"Sequencer started at {self._bpm} bpm")
        self._notify(SequencerEvent.STARTED, bpm=self._bpm)

    def stop(self) -> None:
        """Stop the loop. Safe to call when already stopped."""
        if not self.is_playing:
            return
        self._cancel_task()
        logger.info("Sequencer stopped")
        self._notify(SequencerEvent.STOPPED)

    def _start_transport(self) -> None:
        loop = asyncio.get_running_loop()
        self._current_step = 0
        # Beat one sounds now, not one interval from now
        self._tick()
        self._task = loop.create_task(self._run(self.interval))

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()

    async def _run(self, interval: float) -> None:
        next_tick = time.perf_counter() + interval
        while True:
            delay = next_tick - time.perf_counter()
            if delay > 0:
                await asyncio.sleep(delay)
            self._tick()
            next_tick += interval
            # Skip beats lost to a stalled loop instead of firing them in a burst
            now = time.perf_counter()
            if next_tick < now:
                next_tick = now + interval

    def _tick(self) -> None:
        """Play every enabled pad for the current step, then advance."""
        step = self._current_step
        played: list[int] = []

        for pad_index in range(NUM_PADS):
            if not self._grid[pad_index][step]:
                continue
            pad = self._pad_store.get(pad_index)
            if pad.buffer is None:
                continue
            try:
                self._engine.play(pad.buffer, pad.volume, pad_index)
                played.append(pad_index)
            except Exception as e:
                logger.error(f"Sequencer failed to play pad {pad_index}: {e}", exc_info=True)

        self._current_step = (step + 1) % NUM_STEPS
        self._notify(SequencerEvent.STEP, step=step, pads=played)
