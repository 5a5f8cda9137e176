"""Microphone recorder: capture, encode, decode and commit into a pad."""

import asyncio
import logging
from threading import Lock
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

import numpy as np
import numpy.typing as npt

from ..audio.codec import encode_frames, to_data_url
from ..audio.data import LiveVoice
from ..exceptions import AlreadyRecordingError, DecodeError, SoundSpriteError
from ..models import Pad, RecorderState, key_for_index
from ..protocols import RecorderEvent, RecorderObserver
from ..utils import ObserverManager
from .pad_store import PadStore

if TYPE_CHECKING:
    from ..audio.engine import AudioEngine

logger = logging.getLogger(__name__)


class CaptureSession(Protocol):
    """What the recorder needs from a microphone (MicrophoneCapture or a test fake)."""

    def open(self) -> None: ...

    def start(self, on_block: Callable[[npt.NDArray[np.float32]], None]) -> None: ...

    def release(self) -> None: ...


CaptureFactory = Callable[..., CaptureSession]


def _default_capture_factory(**kwargs: Any) -> CaptureSession:
    from ..audio.capture import MicrophoneCapture

    return MicrophoneCapture(**kwargs)


def default_sample_name(target_index: int) -> str:
    """Name given to a recording when the user did not enter one."""
    return f"Sample {key_for_index(target_index)}"


class Recorder:
    """
    Records the microphone into one pad.

    State Machine:
        IDLE -> CAPTURING (start) -> FINALIZING (stop) -> IDLE

    Only one capture session exists at a time; a second `start()` is
    rejected with AlreadyRecordingError and the first session carries on.
    The capture device is released exactly once per session, whether
    finalization succeeds or fails.
    """

    def __init__(
        self,
        engine: "AudioEngine",
        pad_store: PadStore,
        capture_factory: Optional[CaptureFactory] = None,
        sample_rate: int = 44100,
        channels: int = 1,
        input_device: Optional[int] = None,
        max_seconds: Optional[float] = None,
    ):
        """
        Initialize the recorder.

        Args:
            engine: Audio engine used to decode takes and for monitoring
            pad_store: Pad bank that receives committed takes
            capture_factory: Builds a capture session (defaults to MicrophoneCapture)
            sample_rate: Capture sample rate in Hz
            channels: Capture channel count
            input_device: Input device ID (None for default)
            max_seconds: Stop automatically after this long (None = until stop())
        """
        self._engine = engine
        self._pad_store = pad_store
        self._capture_factory = capture_factory or _default_capture_factory
        self.sample_rate = sample_rate
        self.channels = channels
        self.input_device = input_device
        self.max_seconds = max_seconds

        self._state = RecorderState.IDLE
        self._opening = False
        self._observers = ObserverManager[RecorderObserver](observer_type_name="recorder")

        # Session
        self._capture: Optional[CaptureSession] = None
        self._monitor: Optional[LiveVoice] = None
        self._target_index: Optional[int] = None
        self._name: Optional[str] = None
        self._chunks: list[npt.NDArray[np.float32]] = []
        self._chunk_lock = Lock()
        self._auto_stop_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecorderState.CAPTURING

    @property
    def target_index(self) -> Optional[int]:
        """Pad being recorded into, or None when idle."""
        return self._target_index

    def register_observer(self, observer: RecorderObserver) -> None:
        """Register an observer to receive recorder events."""
        self._observers.register(observer)

    def unregister_observer(self, observer: RecorderObserver) -> None:
        """Unregister an observer."""
        self._observers.unregister(observer)

    def _set_state(self, state: RecorderState) -> None:
        self._state = state
        logger.debug(f"Recorder state: {state.value}")
        self._observers.notify(
            "on_recorder_event",
            RecorderEvent.STATE_CHANGED,
            state=state,
            target_index=self._target_index,
        )

    async def start(self, target_index: int, monitor: bool = False, name: Optional[str] = None) -> None:
        """
        Open the microphone and begin capturing into `target_index`.

        Args:
            target_index: Pad that receives the take on stop()
            monitor: Also play the live input through the output (best effort)
            name: Name for the committed pad (default "Sample <key>")

        Raises:
            AlreadyRecordingError: If a session is already active (nothing changes)
            IndexError: If target_index is out of range
            MicrophonePermissionError: If microphone access is denied
            UnsupportedError: If no input device is available
        """
        if self._state is not RecorderState.IDLE or self._opening:
            raise AlreadyRecordingError(self._target_index)

        if not 0 <= target_index < self._pad_store.size:
            raise IndexError(f"Pad index {target_index} out of range (0-{self._pad_store.size - 1})")

        self._opening = True
        capture = self._capture_factory(
            sample_rate=self.sample_rate, channels=self.channels, device=self.input_device
        )
        try:
            await asyncio.to_thread(capture.open)
            with self._chunk_lock:
                self._chunks = []
            capture.start(self._on_block)
        except BaseException:
            capture.release()
            raise
        finally:
            self._opening = False

        self._capture = capture
        self._target_index = target_index
        self._name = name

        try:
            if monitor:
                self._open_monitor()
            self._set_state(RecorderState.CAPTURING)
        except BaseException:
            self._release_session()
            self._state = RecorderState.IDLE
            self._target_index = None
            self._name = None
            raise

        logger.info(f"Recording into pad {target_index} (monitor={monitor})")

        if self.max_seconds:
            self._auto_stop_task = asyncio.create_task(self._auto_stop(self.max_seconds))

    def _open_monitor(self) -> None:
        try:
            self._monitor = self._engine.open_monitor(num_channels=self.channels)
        except (SoundSpriteError, RuntimeError, OSError) as e:
            logger.warning(f"Input monitoring unavailable, recording without it: {e}")
            self._monitor = None

    def _on_block(self, block: npt.NDArray[np.float32]) -> None:
        """Capture-thread callback: keep the block, feed the monitor."""
        with self._chunk_lock:
            self._chunks.append(block)
        monitor = self._monitor
        if monitor is not None:
            monitor.push(block)

    async def _auto_stop(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
        logger.info(f"Recording reached {seconds:.1f}s limit, stopping")
        try:
            await self.stop()
        except SoundSpriteError as e:
            logger.error(f"Automatic stop failed: {e.technical_message}")

    async def stop(self) -> Optional[Pad]:
        """
        Finalize the active take and commit it into the target pad.

        Returns:
            The committed pad, or None when not capturing

        Raises:
            DecodeError: If the take cannot be decoded; the pad is left untouched
        """
        if self._state is not RecorderState.CAPTURING:
            return None

        target_index = self._target_index
        name = self._name
        self._set_state(RecorderState.FINALIZING)
        self._cancel_auto_stop()

        try:
            self._release_session()
            with self._chunk_lock:
                chunks, self._chunks = self._chunks, []
            pad = await self._finalize(target_index, name, chunks)
        except Exception as e:
            logger.error(f"Recording into pad {target_index} failed: {e}")
            self._observers.notify(
                "on_recorder_event", RecorderEvent.FAILED, target_index=target_index, error=e
            )
            raise
        finally:
            self._release_session()
            self._target_index = None
            self._name = None
            self._set_state(RecorderState.IDLE)

        self._observers.notify(
            "on_recorder_event", RecorderEvent.COMMITTED, target_index=target_index, pad=pad
        )
        return pad

    async def _finalize(
        self,
        target_index: int,
        name: Optional[str],
        chunks: list[npt.NDArray[np.float32]],
    ) -> Pad:
        if not chunks:
            raise DecodeError("no audio was captured", num_bytes=0)

        frames = np.concatenate(chunks, axis=0)
        raw = await asyncio.to_thread(encode_frames, frames, self.sample_rate)
        buffer = await self._engine.decode(raw)
        encoded = await asyncio.to_thread(to_data_url, raw)

        logger.info(
            f"Recorded {buffer.duration:.2f}s into pad {target_index} ({len(raw)} bytes encoded)"
        )
        return self._pad_store.commit(
            target_index,
            buffer,
            encoded,
            name if name and name.strip() else default_sample_name(target_index),
        )

    def _release_session(self) -> None:
        """Release the microphone and monitor. Runs its body once per session."""
        capture, self._capture = self._capture, None
        monitor, self._monitor = self._monitor, None

        if monitor is not None:
            self._engine.close_monitor(monitor)
        if capture is not None:
            capture.release()

    def _cancel_auto_stop(self) -> None:
        task, self._auto_stop_task = self._auto_stop_task, None
        if task is None:
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None  # no running loop
        if task is not current:
            task.cancel()

    def close(self) -> None:
        """Abandon an in-progress capture without committing it."""
        self._cancel_auto_stop()
        if self._state is not RecorderState.CAPTURING:
            return
        self._release_session()
        with self._chunk_lock:
            self._chunks = []
        self._target_index = None
        self._name = None
        self._set_state(RecorderState.IDLE)
        logger.info("Recording discarded")
