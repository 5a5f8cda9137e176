"""Microphone capture exceptions.

This module defines exceptions raised by the recorder:
- RecordingError: Base class for capture errors
- MicrophonePermissionError: Microphone access denied
- UnsupportedError: No capture device available
- AlreadyRecordingError: A capture session is already active
"""

from .base import SoundSpriteError


class RecordingError(SoundSpriteError):
    """Base class for capture errors."""
    pass


class MicrophonePermissionError(RecordingError, PermissionError):
    """Microphone access was denied by the system."""

    def __init__(self, original_error: str | None = None):
        """
        Initialize microphone permission error.

        Args:
            original_error: The original error message from the audio library
        """
        user_msg = "Microphone access denied or error."
        tech_msg = user_msg
        if original_error:
            user_msg = f"Microphone access denied or error: {original_error}"
            tech_msg += f"\nOriginal error: {original_error}"

        super().__init__(
            user_message=user_msg,
            technical_message=tech_msg,
            recoverable=False,
            recovery_hint="Grant microphone access to this terminal and try again.",
        )
        self.original_error = original_error


class UnsupportedError(RecordingError):
    """Audio capture is not available on this system."""

    def __init__(self, detail: str | None = None):
        """
        Initialize unsupported error.

        Args:
            detail: Optional detail about what is missing
        """
        super().__init__(
            user_message="Audio capture is not supported on this system.",
            technical_message=f"No usable input device: {detail}" if detail else None,
            recoverable=False,
            recovery_hint="Connect a microphone, then run 'soundsprite audio list'.",
        )


class AlreadyRecordingError(RecordingError):
    """A second capture was requested while one is active."""

    def __init__(self, target_index: int | None = None):
        """
        Initialize already-recording error.

        Args:
            target_index: Pad index of the active capture session
        """
        msg = "Already recording"
        if target_index is not None:
            msg += f" into pad {target_index}"
        super().__init__(
            user_message=msg + ".",
            recoverable=True,
            recovery_hint="Stop the current recording before starting a new one.",
        )
        self.target_index = target_index
