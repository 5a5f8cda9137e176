"""Pad model representing a single sample slot."""

from pydantic import BaseModel, ConfigDict, Field

from soundsprite.audio.data import AudioData

from .layout import DEFAULT_PAD_NAME, DEFAULT_VOLUME


class Pad(BaseModel):
    """One of the 9 playable sample slots."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(default=DEFAULT_PAD_NAME, description="Display name")
    buffer: AudioData | None = Field(
        default=None, exclude=True, description="Decoded audio ready for playback"
    )
    volume: float = Field(default=DEFAULT_VOLUME, ge=0.0, description="Playback gain")
    encoded_sample: str | None = Field(
        default=None, description="Data URL of the last committed recording"
    )

    @property
    def is_playable(self) -> bool:
        """Check if pad has decoded audio."""
        return self.buffer is not None

    @property
    def has_recording(self) -> bool:
        """Check if pad has a committed recording (even if it failed to decode)."""
        return self.encoded_sample is not None

    @property
    def volume_percent(self) -> int:
        """Volume as the 0-100 slider value."""
        return round(self.volume * 100)

    @classmethod
    def empty(cls) -> "Pad":
        """Create an empty pad."""
        return cls()
