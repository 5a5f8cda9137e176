"""Audio data structures using dataclasses for performance.

These dataclasses store actual audio data (NumPy arrays) and runtime state.
They are NOT Pydantic models because:
- They contain non-serializable data (NumPy arrays)
- They need minimal overhead for real-time audio processing
- They are internal to the audio engine, not part of the persisted snapshot
"""

from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Optional

import numpy as np
import numpy.typing as npt

from ..utils import format_bytes


@dataclass(slots=True)
class AudioData:
    """
    Decoded audio ready for playback.

    Shared read-only between the pad store and any number of voices.
    """

    data: npt.NDArray[np.float32]  # Audio samples as float32
    sample_rate: int                # Sample rate in Hz
    num_channels: int               # Number of channels (1=mono, 2=stereo)
    num_frames: int                 # Number of frames (samples per channel)
    format: Optional[str] = None    # Source format (e.g., 'FLAC', 'WAV')

    @classmethod
    def from_array(
        cls,
        data: npt.NDArray[np.float32],
        sample_rate: int,
        format: Optional[str] = None
    ) -> "AudioData":
        """
        Create AudioData from a NumPy array.

        Args:
            data: Audio data, shape (num_frames,) for mono or
                  (num_frames, num_channels) for multi-channel
            sample_rate: Sample rate in Hz
            format: Source format name, if known

        Returns:
            AudioData instance
        """
        if data.ndim == 1:
            num_channels = 1
            num_frames = len(data)
        elif data.ndim == 2:
            num_frames, num_channels = data.shape
        else:
            raise ValueError(f"Audio data must be 1D or 2D, got {data.ndim}D")

        if data.dtype != np.float32:
            data = data.astype(np.float32)

        return cls(
            data=data,
            sample_rate=sample_rate,
            num_channels=num_channels,
            num_frames=num_frames,
            format=format
        )

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.num_frames / self.sample_rate

    def get_info(self) -> dict:
        """Summary for display (duration, rate, channels, memory size)."""
        size_bytes = self.data.nbytes
        info = {
            'duration': self.duration,
            'sample_rate': self.sample_rate,
            'num_channels': self.num_channels,
            'num_frames': self.num_frames,
            'size_bytes': size_bytes,
            'size_str': format_bytes(size_bytes),
        }
        if self.format:
            info['format'] = self.format
        return info


@dataclass(slots=True)
class Voice:
    """
    One playback of a buffer, created per trigger.

    Each voice owns its cursor and gain, so any number of voices can play
    the same AudioData at once without interfering.
    """

    audio_data: AudioData
    volume: float = 1.0
    pad_index: Optional[int] = None
    position: int = 0
    is_playing: bool = True

    @property
    def num_channels(self) -> int:
        return self.audio_data.num_channels

    def stop(self) -> None:
        """Stop playback."""
        self.is_playing = False

    def get_frames(self, num_frames: int) -> Optional[npt.NDArray[np.float32]]:
        """
        Get the next frames with gain applied, truncated at the end of the buffer.

        Returns:
            Audio frames as float32 array, or None if finished
        """
        if not self.is_playing or self.position >= self.audio_data.num_frames:
            return None

        end_pos = min(self.position + num_frames, self.audio_data.num_frames)
        frames = self.audio_data.data[self.position:end_pos]

        if self.volume != 1.0:
            frames = frames * np.float32(self.volume)

        return frames

    def advance(self, num_frames: int) -> None:
        """Advance the cursor; the voice stops at the end of its buffer."""
        if not self.is_playing:
            return

        self.position += num_frames
        if self.position >= self.audio_data.num_frames:
            self.stop()

    @property
    def progress(self) -> float:
        """Playback progress as fraction (0.0 to 1.0)."""
        if self.audio_data.num_frames == 0:
            return 1.0
        return min(self.position / self.audio_data.num_frames, 1.0)


@dataclass
class LiveVoice:
    """
    Live input routed straight to the output (microphone monitoring).

    The capture thread pushes blocks; the output callback pulls frames.
    Blocks that are not consumed within `max_blocks` pushes are dropped so
    monitoring latency cannot grow without bound.
    """

    num_channels: int = 1
    volume: float = 1.0
    max_blocks: int = 8
    is_playing: bool = True
    _blocks: deque = field(default_factory=deque, init=False, repr=False)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def push(self, block: npt.NDArray[np.float32]) -> None:
        """Queue a block of captured frames."""
        with self._lock:
            self._blocks.append(block)
            while len(self._blocks) > self.max_blocks:
                self._blocks.popleft()

    def stop(self) -> None:
        self.is_playing = False
        with self._lock:
            self._blocks.clear()

    def get_frames(self, num_frames: int) -> Optional[npt.NDArray[np.float32]]:
        """Pull up to num_frames of queued input, or None when nothing is queued."""
        if not self.is_playing:
            return None

        parts = []
        needed = num_frames
        with self._lock:
            while needed > 0 and self._blocks:
                block = self._blocks.popleft()
                if len(block) > needed:
                    self._blocks.appendleft(block[needed:])
                    block = block[:needed]
                parts.append(block)
                needed -= len(block)

        if not parts:
            return None

        frames = np.concatenate(parts, axis=0)
        if self.volume != 1.0:
            frames = frames * np.float32(self.volume)
        return frames

    def advance(self, num_frames: int) -> None:
        # Frames are consumed in get_frames
        pass
