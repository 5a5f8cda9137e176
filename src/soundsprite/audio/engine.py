"""Audio engine: one output device, per-trigger voices, off-loop decoding."""

import asyncio
import logging
from queue import Empty, Full, Queue
from threading import Lock
from typing import Any, Callable, Optional, Protocol

import numpy as np

from ..core.state_machine import DEFAULT_PULSE_DURATION, PadActivityStateMachine
from ..exceptions import AudioDeviceError
from ..protocols import StateObserver
from .codec import decode_bytes
from .data import AudioData, LiveVoice, Voice
from .mixer import AudioMixer

logger = logging.getLogger(__name__)


class OutputDevice(Protocol):
    """What the engine needs from an output device (AudioDevice or a test fake)."""

    num_channels: int

    def set_callback(self, callback: Callable[[np.ndarray, int], None]) -> None: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    @property
    def is_running(self) -> bool: ...


DeviceFactory = Callable[..., OutputDevice]


def _default_device_factory(**kwargs: Any) -> OutputDevice:
    from .device import AudioDevice

    return AudioDevice(**kwargs)


class AudioEngine:
    """
    Audio playback engine for the pad bank.

    Owns the single output device ("audio context"), created lazily on first
    use. Every `play()` gets its own Voice with its own gain, so overlapping
    triggers of one pad, or of different pads, never interfere.

    Voices are handed to the audio callback through a lock-free queue; the
    callback is the only code that touches the active voice list.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        buffer_size: int = 512,
        num_channels: int = 2,
        device: Optional[int] = None,
        pulse_duration: float = DEFAULT_PULSE_DURATION,
        device_factory: Optional[DeviceFactory] = None,
        state_machine: Optional[PadActivityStateMachine] = None,
    ):
        """
        Initialize audio engine.

        Args:
            sample_rate: Output sample rate; decoded audio is resampled to it
            buffer_size: Frames per output block
            num_channels: Output channels (1=mono, 2=stereo)
            device: Output device ID (None for default)
            pulse_duration: Seconds a pad stays highlighted after a trigger
            device_factory: Builds the output device (defaults to AudioDevice)
            state_machine: Activity tracker (one is created if omitted)
        """
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.num_channels = num_channels
        self.device_id = device

        self._device_factory = device_factory or _default_device_factory
        self._device: Optional[OutputDevice] = None
        self._context_lock = Lock()

        self._mixer = AudioMixer(num_channels=num_channels)
        self._state_machine = state_machine or PadActivityStateMachine(pulse_duration)

        # Lock-free hand-off of new voices to the audio thread
        # Sized generously to handle burst inputs without blocking
        self._voice_queue: Queue[Voice | LiveVoice] = Queue(maxsize=256)
        self._voices: list[Voice | LiveVoice] = []

    def ensure_context(self) -> OutputDevice:
        """
        Create and start the output device on first call; return it thereafter.

        Raises:
            AudioDeviceError: If the device cannot be opened
        """
        with self._context_lock:
            if self._device is None:
                device = self._device_factory(
                    sample_rate=self.sample_rate,
                    buffer_size=self.buffer_size,
                    num_channels=self.num_channels,
                    device=self.device_id,
                )
                device.set_callback(self._audio_callback)
                device.start()
                self._device = device
                logger.info("Audio context created")
            return self._device

    @property
    def has_context(self) -> bool:
        return self._device is not None

    async def decode(self, raw: bytes) -> AudioData:
        """
        Decode audio bytes without blocking the event loop.

        Raises:
            DecodeError: If the bytes are invalid or contain no audio
        """
        return await asyncio.to_thread(self.decode_sync, raw)

    def decode_sync(self, raw: bytes) -> AudioData:
        """Blocking variant of `decode`."""
        audio = decode_bytes(raw, target_sample_rate=self.sample_rate)
        logger.debug(f"Decoded {len(raw)} bytes into {audio.duration:.2f}s of audio")
        return audio

    def play(self, buffer: AudioData, gain: float, pad_index: Optional[int] = None) -> Voice:
        """
        Start an independent one-shot playback of `buffer`.

        Safe to call from any thread.

        Args:
            buffer: Decoded audio to play
            gain: Linear gain for this playback only
            pad_index: Pad the buffer belongs to, for activity pulses

        Returns:
            The new voice
        """
        self.ensure_context()

        voice = Voice(audio_data=buffer, volume=max(0.0, float(gain)), pad_index=pad_index)
        try:
            # Non-blocking queue write - if queue is full, drop the trigger
            self._voice_queue.put_nowait(voice)
        except Full:
            logger.warning(f"Voice queue full, dropped trigger for pad {pad_index}")
            voice.stop()
            return voice

        if pad_index is not None:
            self._state_machine.notify_pad_triggered(pad_index)
        return voice

    def open_monitor(self, num_channels: int = 1, volume: float = 1.0) -> LiveVoice:
        """
        Route live input to the output; push captured blocks into the returned voice.

        Raises:
            AudioDeviceError: If the output device cannot be opened or the voice queue is full
        """
        self.ensure_context()
        voice = LiveVoice(num_channels=num_channels, volume=volume)
        try:
            self._voice_queue.put_nowait(voice)
        except Full:
            raise AudioDeviceError(
                "Input monitoring unavailable: too many sounds queued",
                technical_message="Voice queue full while adding the live input voice",
            ) from None
        logger.info("Input monitoring enabled")
        return voice

    def close_monitor(self, voice: LiveVoice) -> None:
        """Stop monitoring; the audio thread drops the voice on its next block."""
        voice.stop()
        logger.info("Input monitoring disabled")

    def register_observer(self, observer: StateObserver) -> None:
        """Register an observer to receive activity pulse events."""
        self._state_machine.register_observer(observer)

    def unregister_observer(self, observer: StateObserver) -> None:
        """Unregister an observer."""
        self._state_machine.unregister_observer(observer)

    def is_pad_active(self, pad_index: int) -> bool:
        """Check whether a pad's activity pulse is showing."""
        return self._state_machine.is_pad_active(pad_index)

    def close(self) -> None:
        """Stop the output device and drop all voices."""
        self._state_machine.shutdown()
        with self._context_lock:
            if self._device is not None:
                self._device.stop()
                self._device = None
                logger.info("Audio context closed")

        while True:
            try:
                self._voice_queue.get_nowait().stop()
            except Empty:
                break
        for voice in self._voices:
            voice.stop()
        self._voices = []

    def _audio_callback(self, outdata: np.ndarray, frames: int) -> None:
        """
        Audio callback for mixing and rendering.

        Called by the output device for each audio block.
        Drains the voice queue first for minimal trigger-to-sound latency.

        Args:
            outdata: Output buffer to fill, (frames, channels)
            frames: Number of frames requested
        """
        try:
            while True:
                try:
                    self._voices.append(self._voice_queue.get_nowait())
                except Empty:
                    break

            mixed = self._mixer.mix(self._voices, frames)

            # Drop voices that finished during this block
            self._voices = [voice for voice in self._voices if voice.is_playing]

            self._mixer.soft_clip(mixed)

            if self.num_channels == 1:
                outdata[:, 0] = mixed
            else:
                outdata[:] = mixed

        except Exception as e:
            # Log error and output silence to prevent audio stream crash
            logger.exception(f"Error in audio callback: {e}")
            outdata.fill(0.0)

    @property
    def is_running(self) -> bool:
        """Check if the output device is running."""
        return self._device is not None and self._device.is_running

    @property
    def active_voices(self) -> int:
        """Number of voices the audio thread is currently mixing."""
        return sum(1 for voice in self._voices if voice.is_playing)

    def __enter__(self):
        """Context manager entry."""
        self.ensure_context()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
