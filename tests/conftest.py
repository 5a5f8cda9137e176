"""Pytest fixtures for tests."""

from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Callable, Optional

import numpy as np
import pytest

from soundsprite.audio.codec import encode_frames, to_data_url
from soundsprite.audio.data import AudioData
from soundsprite.audio.engine import AudioEngine
from soundsprite.core.pad_store import PadStore
from soundsprite.models import AppConfig

SAMPLE_RATE = 44100


class FakeOutputDevice:
    """Output device stand-in: records lifecycle calls and renders blocks on demand."""

    instances: list["FakeOutputDevice"] = []

    def __init__(self, sample_rate=SAMPLE_RATE, buffer_size=256, num_channels=2, device=None):
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.num_channels = num_channels
        self.device = device
        self.callback = None
        self.start_count = 0
        self.stop_count = 0
        self._running = False
        FakeOutputDevice.instances.append(self)

    def set_callback(self, callback):
        self.callback = callback

    def start(self):
        self.start_count += 1
        self._running = True

    def stop(self):
        self.stop_count += 1
        self._running = False

    @property
    def is_running(self):
        return self._running

    def render(self, frames: Optional[int] = None) -> np.ndarray:
        """Run one audio callback and return the output block."""
        frames = frames or self.buffer_size
        outdata = np.zeros((frames, self.num_channels), dtype=np.float32)
        self.callback(outdata, frames)
        return outdata


class FakeCapture:
    """Microphone stand-in: feeds preset blocks as soon as capture starts."""

    def __init__(self, sample_rate=SAMPLE_RATE, channels=1, device=None,
                 blocks=None, open_error: Optional[Exception] = None):
        self.sample_rate = sample_rate
        self.channels = channels
        self.device = device
        self.blocks = blocks if blocks is not None else []
        self.open_error = open_error
        self.opened = False
        self.on_block = None
        self.release_count = 0

    def open(self):
        if self.open_error is not None:
            raise self.open_error
        self.opened = True

    def start(self, on_block):
        self.on_block = on_block
        for block in self.blocks:
            on_block(block)

    def feed(self, block: np.ndarray):
        self.on_block(block)

    def release(self):
        self.release_count += 1


class CaptureFactory:
    """Builds FakeCaptures and remembers each one."""

    def __init__(self, blocks=None, open_error: Optional[Exception] = None):
        self.blocks = blocks
        self.open_error = open_error
        self.created: list[FakeCapture] = []

    def __call__(self, **kwargs) -> FakeCapture:
        capture = FakeCapture(
            blocks=list(self.blocks) if self.blocks is not None else None,
            open_error=self.open_error,
            **kwargs,
        )
        self.created.append(capture)
        return capture

    @property
    def last(self) -> FakeCapture:
        return self.created[-1]


def make_tone(duration: float = 0.1, sample_rate: int = SAMPLE_RATE, freq: float = 440.0) -> np.ndarray:
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False, dtype=np.float32)
    return (0.5 * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_audio_array():
    """Generate 100ms of a 440 Hz tone as a NumPy array."""
    return make_tone(0.1)


@pytest.fixture
def audio_data(sample_audio_array):
    """Decoded mono AudioData."""
    return AudioData.from_array(sample_audio_array, SAMPLE_RATE)


@pytest.fixture
def flac_bytes(sample_audio_array):
    """The tone encoded as FLAC."""
    return encode_frames(sample_audio_array, SAMPLE_RATE)


@pytest.fixture
def flac_data_url(flac_bytes):
    """The tone as a data URL, as stored in snapshots."""
    return to_data_url(flac_bytes)


@pytest.fixture
def capture_blocks(sample_audio_array):
    """The tone split into 4 capture blocks."""
    return np.array_split(sample_audio_array, 4)


@pytest.fixture
def capture_factory(capture_blocks):
    """Factory producing fake microphones that deliver the tone."""
    return CaptureFactory(blocks=capture_blocks)


@pytest.fixture
def engine():
    """AudioEngine on a fake output device with no pulse timer."""
    engine = AudioEngine(
        sample_rate=SAMPLE_RATE,
        buffer_size=256,
        num_channels=2,
        pulse_duration=0,
        device_factory=FakeOutputDevice,
    )
    yield engine
    engine.close()


@pytest.fixture
def pad_store():
    return PadStore()


@pytest.fixture
def config(temp_dir):
    """Config pointing every path into a temp directory."""
    return AppConfig(
        storage_path=temp_dir / "storage.json",
        export_dir=temp_dir / "exports",
        pulse_duration=0,
    )


@pytest.fixture
def soundboard_factory(config, capture_factory) -> Callable:
    """Build Soundboards sharing one config (and so one storage file)."""
    from soundsprite import Soundboard

    boards = []

    def _make(**kwargs):
        kwargs.setdefault("config", config)
        kwargs.setdefault("capture_factory", capture_factory)
        kwargs.setdefault("device_factory", FakeOutputDevice)
        board = Soundboard(**kwargs)
        boards.append(board)
        return board

    yield _make

    for board in boards:
        board.close()


@pytest.fixture
def tone():
    """Factory for test tones: tone(duration, sample_rate=44100, freq=440.0)."""
    return make_tone
