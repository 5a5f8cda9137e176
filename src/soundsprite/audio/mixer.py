"""Audio mixer for combining voices into one output block."""

from typing import Protocol, Sequence

import numpy as np
import numpy.typing as npt

from ..utils.audio import ensure_array


class MixSource(Protocol):
    """Anything the mixer can pull frames from (Voice, LiveVoice)."""

    is_playing: bool

    @property
    def num_channels(self) -> int: ...

    def get_frames(self, num_frames: int) -> npt.NDArray[np.float32] | None: ...

    def advance(self, num_frames: int) -> None: ...


class AudioMixer:
    """
    Mix multiple audio sources into a single output.

    Called only from the audio callback.
    """

    def __init__(self, num_channels: int = 2):
        """
        Initialize audio mixer.

        Args:
            num_channels: Number of output channels (1=mono, 2=stereo)
        """
        self.num_channels = num_channels

    def mix(self, sources: Sequence[MixSource], num_frames: int) -> npt.NDArray[np.float32]:
        """
        Mix sources into a single buffer and advance each of them.

        Args:
            sources: Voices to mix
            num_frames: Number of frames to generate

        Returns:
            Mixed audio buffer (num_frames, num_channels) or (num_frames,) for mono
        """
        if self.num_channels == 1:
            output = np.zeros(num_frames, dtype=np.float32)
        else:
            output = np.zeros((num_frames, self.num_channels), dtype=np.float32)

        for source in sources:
            if not source.is_playing:
                continue

            frames = source.get_frames(num_frames)
            if frames is None:
                # Nothing left: let the voice finish
                source.advance(num_frames)
                continue

            frames_to_add = self._match_channels(frames, source.num_channels)

            add_length = min(len(frames_to_add), num_frames)
            output[:add_length] += frames_to_add[:add_length]

            source.advance(add_length)

        return output

    def _match_channels(
        self,
        frames: npt.NDArray[np.float32],
        source_channels: int
    ) -> npt.NDArray[np.float32]:
        """
        Convert audio frames to match output channel count.

        Args:
            frames: Input audio frames
            source_channels: Number of channels in source

        Returns:
            Audio frames with matching channel count
        """
        if frames.ndim == 2 and frames.shape[1] == 1:
            frames = frames[:, 0]
            source_channels = 1

        if source_channels == self.num_channels:
            return frames

        # Mono to stereo
        if source_channels == 1 and self.num_channels == 2:
            return np.column_stack([frames, frames])

        # Multi-channel to mono
        if source_channels > 1 and self.num_channels == 1:
            return ensure_array(np.mean(frames, axis=1, dtype=np.float32))

        # Multi-channel to stereo (take first 2 channels)
        if source_channels > 2 and self.num_channels == 2:
            return frames[:, :2]

        return frames

    @staticmethod
    def soft_clip(buffer: npt.NDArray[np.float32]) -> None:
        """
        Apply soft clipping (tanh) in-place to prevent harsh distortion.

        Args:
            buffer: Audio buffer to soft clip
        """
        np.tanh(buffer, out=buffer)
