"""Microphone input stream used by the recorder."""

import logging
from typing import Callable, Optional

import numpy as np
import numpy.typing as npt
import sounddevice as sd

from ..exceptions import wrap_capture_error

logger = logging.getLogger(__name__)

BlockCallback = Callable[[npt.NDArray[np.float32]], None]


class MicrophoneCapture:
    """
    One capture session on an input device.

    Lifecycle: ``open()`` (may block while the host grants access),
    ``start(on_block)``, then ``release()`` exactly once. Blocks are
    delivered on the PortAudio thread as float32 arrays, (frames,) for
    mono and (frames, channels) otherwise.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        channels: int = 1,
        device: Optional[int] = None,
        blocksize: int = 0,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.blocksize = blocksize

        self._stream: Optional[sd.InputStream] = None
        self._on_block: Optional[BlockCallback] = None
        self._released = False

    def open(self) -> None:
        """
        Acquire the input device.

        Raises:
            MicrophonePermissionError: If the host refuses access
            UnsupportedError: If there is no usable input device
        """
        try:
            self._stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                device=self.device,
                blocksize=self.blocksize,
                dtype=np.float32,
                callback=self._callback,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise wrap_capture_error(e) from e

        logger.info(
            f"Microphone opened ({self.channels} ch @ {self.sample_rate} Hz, device={self.device})"
        )

    def start(self, on_block: BlockCallback) -> None:
        """Begin delivering blocks to `on_block`."""
        if self._stream is None:
            raise RuntimeError("Capture not opened. Call open() first.")

        self._on_block = on_block
        try:
            self._stream.start()
        except sd.PortAudioError as e:
            raise wrap_capture_error(e) from e

    def release(self) -> None:
        """Stop and close the stream. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self._on_block = None

        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except sd.PortAudioError as e:
                logger.warning(f"Error closing microphone stream: {e}")
            self._stream = None
        logger.info("Microphone released")

    @property
    def is_released(self) -> bool:
        return self._released

    def _callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            logger.warning(f"Capture callback status: {status}")

        on_block = self._on_block
        if on_block is None:
            return

        # indata is reused by PortAudio after the callback returns
        block = indata[:, 0].copy() if self.channels == 1 else indata.copy()
        on_block(block)
