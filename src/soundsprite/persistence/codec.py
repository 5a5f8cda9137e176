"""Snapshot save, load and rehydration."""

import logging
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from ..audio.codec import from_data_url
from ..exceptions import ErrorCollector, collect_errors
from ..models import Pad, PadRecord, Snapshot
from .store import KeyValueStore, StoreCorruptedError

if TYPE_CHECKING:
    from ..audio.engine import AudioEngine
    from ..core.pad_store import PadStore
    from ..core.sequencer import Sequencer

logger = logging.getLogger(__name__)

STORAGE_KEY = "soundsprite_v1"


class SnapshotCodec:
    """
    Serializes the pad bank, grid and tempo into the key-value store.

    Saving never raises into the caller's mutation path, and a missing or
    malformed record loads as "no snapshot" rather than an error.
    """

    def __init__(self, store: KeyValueStore, engine: "AudioEngine", key: str = STORAGE_KEY):
        self._store = store
        self._engine = engine
        self.key = key

    def save(self, pads: list[Pad], grid: list[list[bool]], bpm: int) -> bool:
        """
        Write the snapshot, replacing any previous one.

        Returns:
            True if the record was written
        """
        snapshot = Snapshot(
            pads=[PadRecord.from_pad(pad) for pad in pads],
            seq=grid,
            bpm=bpm,
        )
        try:
            self._store.set(self.key, snapshot.model_dump_json(by_alias=True))
        except OSError as e:
            logger.error(f"Failed to save snapshot to {self._store.path}: {e}")
            return False
        logger.debug(f"Snapshot saved ({sum(p.data_url is not None for p in snapshot.pads)} recordings)")
        return True

    def load(self) -> Optional[Snapshot]:
        """Read the saved snapshot; None when absent or unreadable."""
        try:
            text = self._store.get(self.key)
        except (OSError, StoreCorruptedError) as e:
            logger.warning(f"Could not read saved snapshot: {e}")
            return None

        if text is None:
            logger.info("No saved snapshot")
            return None

        try:
            snapshot = Snapshot.model_validate_json(text)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed snapshot: {e.error_count()} validation error(s)")
            return None

        logger.info("Loaded saved snapshot")
        return snapshot

    def clear(self) -> bool:
        """Delete the saved snapshot (reset-all). Returns True if one was removed."""
        try:
            removed = self._store.remove(self.key)
        except (OSError, StoreCorruptedError) as e:
            logger.error(f"Failed to clear saved snapshot: {e}")
            return False
        if removed:
            logger.info("Saved snapshot cleared")
        return removed

    async def rehydrate(
        self,
        snapshot: Snapshot,
        pad_store: "PadStore",
        sequencer: "Sequencer",
    ) -> ErrorCollector:
        """
        Restore pads (decoding each recording), grid and tempo.

        A pad whose recording fails to decode keeps its name, volume and
        encoding but has no buffer; the remaining pads are unaffected.

        Returns:
            Collector holding one entry per pad that failed to decode
        """
        collector = collect_errors("restore pads")

        for index, record in enumerate(snapshot.pads):
            buffer = None
            if record.data_url:
                with collector.try_operation(f"pad {index} ('{record.name}')"):
                    _, raw = from_data_url(record.data_url)
                    buffer = await self._engine.decode(raw)

            pad_store.commit(index, buffer, record.data_url, record.name, volume=record.volume)

        sequencer.restore(snapshot.seq, snapshot.bpm)

        if collector.has_errors:
            logger.warning(collector.get_summary())
        else:
            logger.info(f"Restored {len(snapshot.pads)} pads at {snapshot.bpm} bpm")
        return collector
