"""Audio output device and stream management."""

import logging
import sys
from typing import Callable, Optional

import numpy as np
import sounddevice as sd

from ..exceptions import AudioDeviceError, wrap_audio_device_error

logger = logging.getLogger(__name__)


class AudioDevice:
    """
    Low-latency audio output device and stream management.

    Handles device querying, validation, and stream lifecycle.
    No soundboard logic - the engine supplies the callback.
    """

    def __init__(
        self,
        sample_rate: int = 44100,
        buffer_size: int = 512,
        num_channels: int = 2,
        device: Optional[int] = None,
        low_latency: bool = True
    ):
        """
        Initialize audio device.

        Args:
            sample_rate: Audio sample rate in Hz
            buffer_size: Audio buffer size in frames (lower = less latency)
            num_channels: Number of output channels (1=mono, 2=stereo)
            device: Output device ID (None for default)
            low_latency: Enable low-latency optimizations (WASAPI exclusive)

        Raises:
            AudioDeviceError: If the device ID is invalid
        """
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.num_channels = num_channels
        self.low_latency = low_latency

        if device is not None:
            self._validate_device(device)

        self.device = device

        # Stream state
        self._stream: Optional[sd.OutputStream] = None
        self._is_running = False
        self._callback: Optional[Callable[[np.ndarray, int], None]] = None

    @staticmethod
    def _get_platform_apis() -> tuple[list[str], str]:
        """
        Get platform-specific low-latency APIs.

        - Windows: ASIO, WASAPI
        - macOS: Core Audio
        - Linux: ALSA, JACK

        Returns:
            Tuple of (api_list, api_names_string)
        """
        if sys.platform == 'win32':
            return ['ASIO', 'WASAPI'], "ASIO/WASAPI"
        elif sys.platform == 'darwin':
            return ['Core Audio'], "Core Audio"
        else:
            return ['ALSA', 'JACK'], "ALSA/JACK"

    @staticmethod
    def _describe_device(device_id: int) -> tuple[bool, str, str]:
        """
        Check whether a device uses a low-latency audio API.

        Returns:
            Tuple of (is_low_latency, hostapi_name, device_name)

        Raises:
            AudioDeviceError: If device_id is invalid
        """
        try:
            device_info = sd.query_devices(device_id)
            hostapi_name = sd.query_hostapis(device_info['hostapi'])['name']
        except (sd.PortAudioError, ValueError, IndexError) as e:
            raise AudioDeviceError(
                f"Invalid audio device ID: {device_id}",
                device_id=device_id,
                technical_message=str(e),
            ) from e

        low_latency_apis, _ = AudioDevice._get_platform_apis()
        is_valid = any(api in hostapi_name for api in low_latency_apis)
        return is_valid, hostapi_name, device_info['name']

    def _validate_device(self, device_id: int) -> None:
        """Warn when a device is not on a low-latency host API."""
        is_valid, hostapi_name, device_name = self._describe_device(device_id)

        if not is_valid:
            _, api_names = self._get_platform_apis()
            logger.warning(
                f"Device '{device_name}' uses Host API '{hostapi_name}'; "
                f"{api_names} devices give the lowest latency."
            )
        else:
            logger.info(f"Validated device: {device_name} ({hostapi_name})")

    def set_callback(self, callback: Callable[[np.ndarray, int], None]) -> None:
        """
        Set audio callback function.

        The callback will be called with (outdata, frames) for each audio block.
        """
        self._callback = callback

    def start(self) -> None:
        """
        Start audio stream.

        Raises:
            RuntimeError: If no callback has been set
            AudioDeviceError: If the stream cannot be opened
        """
        if self._is_running:
            return

        if self._callback is None:
            raise RuntimeError("No audio callback set. Call set_callback() first.")

        device_id = self.device if self.device is not None else sd.default.device[1]
        try:
            self._start_stream(self._stream_config(device_id))
        except sd.PortAudioError as e:
            raise wrap_audio_device_error(e, device_id) from e

    def stop(self) -> None:
        """Stop audio stream."""
        if not self._is_running:
            return

        if self._stream:
            self._stream.stop()
            self._stream.close()
            self._stream = None

        self._is_running = False
        logger.info("Audio stream stopped")

    def _stream_config(self, device_id: int) -> dict:
        """Build OutputStream arguments for the device, logging what was chosen."""
        device_info = sd.query_devices(device_id)
        hostapi_name = sd.query_hostapis(device_info['hostapi'])['name']
        logger.info(f"Audio device: {device_info['name']} ({hostapi_name})")
        logger.debug(f"  Default sample rate: {device_info['default_samplerate']} Hz")

        config = dict(
            samplerate=self.sample_rate,
            blocksize=self.buffer_size,
            channels=self.num_channels,
            device=device_id,
            dtype=np.float32,
            callback=self._audio_callback,
        )

        # WASAPI exclusive mode if available (Windows only)
        if 'WASAPI' in hostapi_name and self.low_latency and hasattr(sd, 'WasapiSettings'):
            try:
                config['extra_settings'] = sd.WasapiSettings(exclusive=True)
                logger.debug("Using WASAPI exclusive mode")
            except sd.PortAudioError:
                logger.info("WASAPI exclusive mode not available, using shared mode")
        return config

    def _start_stream(self, config: dict) -> None:
        self._stream = sd.OutputStream(**config)
        self._stream.start()
        self._is_running = True

        buffer_ms = self.buffer_size / self.sample_rate * 1000
        logger.info(
            f"Output stream started: {self.buffer_size} frames ({buffer_ms:.1f}ms), "
            f"latency {self._stream.latency * 1000:.1f}ms"
        )

    def _audio_callback(self, outdata: np.ndarray, frames: int, time_info, status) -> None:
        """sounddevice callback; silence until the engine supplies its own."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            self._callback(outdata, frames)
        else:
            outdata.fill(0)

    @property
    def is_running(self) -> bool:
        return self._is_running

    @staticmethod
    def list_output_devices() -> list[tuple[int, str, str]]:
        """
        List all audio output devices.

        Returns:
            List of tuples (device_id, device_name, host_api_name)
        """
        return _list_devices('max_output_channels')

    @staticmethod
    def list_input_devices() -> list[tuple[int, str, str]]:
        """List audio input (capture) devices as (device_id, device_name, host_api_name)."""
        return _list_devices('max_input_channels')


def _list_devices(channel_key: str) -> list[tuple[int, str, str]]:
    devices = sd.query_devices()
    hostapis = sd.query_hostapis()
    return [
        (i, device['name'], hostapis[device['hostapi']]['name'])
        for i, device in enumerate(devices)
        if device[channel_key] > 0
    ]
