"""High-level soundboard facade owning all application state."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from ..audio.data import Voice
from ..audio.engine import AudioEngine, DeviceFactory
from ..exceptions import ErrorCollector
from ..models import AppConfig, Pad, index_for_key
from ..persistence import KeyValueStore, SnapshotCodec, export_all, export_pad
from ..protocols import EditEvent, SequencerEvent
from .pad_store import PadStore
from .recorder import CaptureFactory, Recorder
from .sequencer import Sequencer

logger = logging.getLogger(__name__)

# Sequencer events that change what gets saved
PERSISTENT_SEQUENCER_EVENTS = frozenset({
    SequencerEvent.CELL_TOGGLED,
    SequencerEvent.TEMPO_CHANGED,
    SequencerEvent.GRID_CLEARED,
    SequencerEvent.RESET,
})


class Soundboard:
    """
    The soundboard application: pad bank, recorder, sequencer and persistence.

    Coordinates the components and saves a snapshot after every persistent
    mutation (pad edits, recordings, grid and tempo changes). Components
    only get the slice of state they need:

    - AudioEngine: output device, decoding, playback
    - PadStore: the 9 pads
    - Recorder: microphone -> pad
    - Sequencer: grid, tempo, transport
    - SnapshotCodec: durable snapshot
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        engine: Optional[AudioEngine] = None,
        store: Optional[KeyValueStore] = None,
        capture_factory: Optional[CaptureFactory] = None,
        device_factory: Optional[DeviceFactory] = None,
    ):
        """
        Initialize the soundboard.

        Args:
            config: Application configuration (loads default if None)
            engine: Audio engine (built from config if None)
            store: Durable store (config.storage_path if None)
            capture_factory: Microphone factory passed to the recorder
            device_factory: Output device factory for the default engine
        """
        self.config = config or AppConfig.load_or_default()

        self.engine = engine or AudioEngine(
            sample_rate=self.config.sample_rate,
            buffer_size=self.config.buffer_size,
            num_channels=self.config.output_channels,
            device=self.config.output_device,
            pulse_duration=self.config.pulse_duration,
            device_factory=device_factory,
        )
        self.pad_store = PadStore()
        self.sequencer = Sequencer(self.engine, self.pad_store, bpm=self.config.default_bpm)
        self.recorder = Recorder(
            self.engine,
            self.pad_store,
            capture_factory=capture_factory,
            sample_rate=self.config.sample_rate,
            channels=self.config.input_channels,
            input_device=self.config.input_device,
            max_seconds=self.config.max_record_seconds,
        )
        self.codec = SnapshotCodec(store or KeyValueStore(self.config.storage_path), self.engine)

        self._autosave_suspended = 0
        self.pad_store.register_observer(self)
        self.sequencer.register_observer(self)

    # =================================================================
    # Persistence
    # =================================================================

    async def load(self) -> Optional[ErrorCollector]:
        """
        Restore the saved snapshot, if any.

        Returns:
            Per-pad decode failures, or None when nothing was saved
        """
        snapshot = self.codec.load()
        if snapshot is None:
            return None

        with self._suspend_autosave():
            return await self.codec.rehydrate(snapshot, self.pad_store, self.sequencer)

    def save(self) -> bool:
        """Write the current state. Returns False if the write failed."""
        return self.codec.save(self.pad_store.pads, self.sequencer.grid, self.sequencer.bpm)

    @contextmanager
    def _suspend_autosave(self) -> Iterator[None]:
        self._autosave_suspended += 1
        try:
            yield
        finally:
            self._autosave_suspended -= 1

    def _autosave(self) -> None:
        if self._autosave_suspended or not self.config.auto_save:
            return
        self.save()

    def on_edit_event(self, event: EditEvent, pad_indices: list[int], pads: list[Pad]) -> None:
        """Save after pad edits; a full reset removes the saved snapshot instead."""
        if event is EditEvent.PADS_RESET:
            return
        self._autosave()

    def on_sequencer_event(self, event: SequencerEvent, **kwargs: Any) -> None:
        """Save after grid and tempo changes."""
        if event in PERSISTENT_SEQUENCER_EVENTS:
            self._autosave()

    # =================================================================
    # Playing
    # =================================================================

    def trigger(self, index: int) -> Optional[Voice]:
        """
        Play a pad at its volume.

        Returns:
            The playing voice, or None if the pad has no audio

        Raises:
            IndexError: If index is out of range
        """
        pad = self.pad_store.get(index)
        if pad.buffer is None:
            logger.debug(f"Pad {index} has no audio, ignoring trigger")
            return None
        return self.engine.play(pad.buffer, pad.volume, index)

    def trigger_key(self, key: str) -> Optional[Voice]:
        """Play the pad mapped to a keyboard key; unmapped keys are ignored."""
        index = index_for_key(key)
        if index is None:
            return None
        return self.trigger(index)

    # =================================================================
    # Recording
    # =================================================================

    async def start_recording(
        self, index: int, monitor: Optional[bool] = None, name: Optional[str] = None
    ) -> None:
        """Start recording into a pad (monitoring defaults to the config setting)."""
        await self.recorder.start(
            index, monitor=self.config.monitor if monitor is None else monitor, name=name
        )

    async def stop_recording(self) -> Optional[Pad]:
        """Finish the active recording; returns the committed pad."""
        return await self.recorder.stop()

    # =================================================================
    # Bulk operations
    # =================================================================

    def reset_all(self) -> None:
        """Clear every pad, the grid and the tempo, and delete the saved snapshot."""
        with self._suspend_autosave():
            self.sequencer.reset()
            self.pad_store.reset_all()
        self.codec.clear()
        logger.info("Soundboard reset")

    def export_pad(self, index: int, directory: Optional[Path] = None) -> Path:
        """
        Export one pad's recording.

        Raises:
            IndexError: If index is out of range
            NoSampleError: If the pad has no recording
        """
        return export_pad(self.pad_store.get(index), index, directory or self.config.export_dir)

    def export_all(self, directory: Optional[Path] = None) -> tuple[list[Path], ErrorCollector]:
        """Export every recorded pad."""
        return export_all(self.pad_store.pads, directory or self.config.export_dir)

    def close(self) -> None:
        """Stop the sequencer, abandon any recording and release the audio device."""
        self.sequencer.stop()
        self.recorder.close()
        self.engine.close()
        logger.info("Soundboard closed")
