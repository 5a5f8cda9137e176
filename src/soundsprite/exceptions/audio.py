"""Audio-related exceptions.

This module defines exceptions for audio output and decoding:
- AudioError: Base class for audio errors
- AudioDeviceError: Output device could not be opened or used
- DecodeError: Bytes could not be decoded into playable audio
"""

from .base import SoundSpriteError


class AudioError(SoundSpriteError):
    """Base class for audio errors."""
    pass


class AudioDeviceError(AudioError):
    """Audio device initialization or operation failed."""

    def __init__(self, user_message: str, device_id: int | None = None, **kwargs):
        """
        Initialize audio device error.

        Args:
            user_message: User-friendly error message
            device_id: The device ID that failed (if applicable)
        """
        kwargs.setdefault("recovery_hint", "Run 'soundsprite audio list' to see available devices.")
        super().__init__(user_message, **kwargs)
        self.device_id = device_id


class DecodeError(AudioError):
    """Audio bytes are not valid, or contain no audio."""

    def __init__(self, reason: str, num_bytes: int | None = None):
        """
        Initialize decode error.

        Args:
            reason: Why decoding failed (library message)
            num_bytes: Size of the rejected payload, if known
        """
        tech_msg = f"Audio decode failed: {reason}"
        if num_bytes is not None:
            tech_msg += f" ({num_bytes} bytes)"

        super().__init__(
            user_message="Could not decode recorded audio.",
            technical_message=tech_msg,
            recoverable=True,
            recovery_hint="Try recording again.",
        )
        self.reason = reason
        self.num_bytes = num_bytes
