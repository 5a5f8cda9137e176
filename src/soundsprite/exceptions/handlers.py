"""
Centralized error handling utilities.

Each layer translates errors to be more useful at the next level up:

```
CLI            formats error.user_message, shows error.recovery_hint
   ↑ SoundSpriteError
Core services  catch low-level exceptions, convert to SoundSpriteError
   ↑ Exception, OSError, LibsndfileError, PortAudioError
Audio / IO     raise standard or library exceptions
```

## Handling Patterns

| Pattern | Code |
|---------|------|
| Convert an audio library error | `raise wrap_audio_device_error(e, device_id=3) from e` |
| Convert a pydantic error | `raise wrap_pydantic_error(e, str(path)) from e` |
| Try several pads, collect errors | `collector = collect_errors("restore pads"); with collector.try_operation("pad 3"): ...` |
| Show an error in the CLI | `message, hint = format_error_for_display(e)` |
"""

import logging
from typing import Any, Optional

from .audio import AudioDeviceError
from .base import SoundSpriteError
from .config import ConfigFileInvalidError, ConfigValidationError
from .recording import MicrophonePermissionError, UnsupportedError

logger = logging.getLogger(__name__)


def wrap_pydantic_error(error: Exception, file_path: str) -> SoundSpriteError:
    """
    Convert Pydantic validation errors to SoundSprite exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    # Invalid syntax rather than invalid values
    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get('loc', ('unknown',)))
            return ConfigValidationError(
                field=field,
                value=first_error.get('input'),
                error_msg=first_error.get('msg', 'validation failed'),
                file_path=file_path
            )
        if errors:
            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ('unknown',)))
                error_lines.append(f"  - {field}: {err.get('msg', 'validation failed')}")

            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=f"{len(errors)} validation errors:\n" + "\n".join(error_lines),
                file_path=file_path
            )

    return ConfigValidationError(field="unknown", value=None, error_msg=error_msg, file_path=file_path)


def wrap_audio_device_error(error: Exception, device_id: Optional[int] = None) -> SoundSpriteError:
    """
    Convert low-level output device errors to SoundSprite exceptions.

    Args:
        error: The original exception from sounddevice/PortAudio
        device_id: The device ID involved in the error

    Returns:
        An AudioDeviceError with a user-facing message
    """
    error_msg = str(error)

    if "PaErrorCode -9996" in error_msg or "Invalid device" in error_msg:
        return AudioDeviceError(
            user_message="Audio output device is unavailable or already in use.",
            technical_message=f"Audio device {device_id} error: {error_msg}",
            device_id=device_id,
            recoverable=True,
        )

    return AudioDeviceError(
        user_message=f"Audio device error: {error_msg}",
        technical_message=f"Audio device {device_id} error: {error_msg}",
        device_id=device_id
    )


def wrap_capture_error(error: Exception) -> SoundSpriteError:
    """
    Convert a failure to open the microphone into a typed recording error.

    PortAudio reports a missing input device as an invalid or unavailable
    device; anything else (host refused the stream) is treated as denied access.

    Args:
        error: The original exception from sounddevice/PortAudio

    Returns:
        UnsupportedError or MicrophonePermissionError
    """
    error_msg = str(error)
    lowered = error_msg.lower()

    if (
        "PaErrorCode -9996" in error_msg
        or "PaErrorCode -9998" in error_msg
        or "no default input" in lowered
        or "invalid device" in lowered
        or "invalid number of channels" in lowered
    ):
        return UnsupportedError(error_msg)

    return MicrophonePermissionError(error_msg)


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, SoundSpriteError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None


def collect_errors(operation: str) -> "ErrorCollector":
    """
    Create an error collector for batch operations.

    Example:
        ```python
        collector = collect_errors("restore pads")

        for index, record in enumerate(snapshot.pads):
            with collector.try_operation(f"pad {index}"):
                restore(index, record)

        if collector.has_errors:
            logger.warning(collector.get_summary())
        ```

    Args:
        operation: Description of the overall operation

    Returns:
        ErrorCollector instance
    """
    return ErrorCollector(operation)


class ErrorCollector:
    """
    Collects errors during batch operations.

    Allows operations to continue even if some fail, then
    report all failures at once. Every collected error is logged.
    """

    def __init__(self, operation: str):
        """
        Initialize error collector.

        Args:
            operation: Description of the overall operation
        """
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        """Check if any errors were collected."""
        return len(self.errors) > 0

    @property
    def error_count(self) -> int:
        """Get the number of errors collected."""
        return len(self.errors)

    def try_operation(self, sub_operation: str) -> "ErrorCollector._OperationContext":
        """
        Context manager for a single operation within the batch.

        Args:
            sub_operation: Description of this specific operation

        Returns:
            Context manager that catches and stores errors
        """
        return self._OperationContext(self, sub_operation)

    def get_summary(self) -> str:
        """
        Get a summary of collected errors.

        Returns:
            Multi-line summary string
        """
        if not self.has_errors:
            return f"All operations completed successfully ({self.success_count} total)"

        summary = (
            f"Failed to {self.operation}: {self.error_count} of "
            f"{self.error_count + self.success_count} failed:\n"
        )
        for sub_op, error in self.errors:
            summary += f"  - {sub_op}: {error}\n"

        return summary.rstrip()

    class _OperationContext:
        """Internal context manager for individual operations."""

        def __init__(self, collector: "ErrorCollector", sub_operation: str):
            self.collector = collector
            self.sub_operation = sub_operation

        def __enter__(self) -> "ErrorCollector._OperationContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
            if exc_type is None:
                self.collector.success_count += 1
                return False

            # Only ordinary errors are collected; cancellation and interrupts propagate
            if not issubclass(exc_type, Exception):
                return False

            if isinstance(exc_val, SoundSpriteError):
                logger.warning(
                    f"{self.collector.operation}: {self.sub_operation} failed: {exc_val.technical_message}"
                )
            else:
                logger.warning(
                    f"{self.collector.operation}: {self.sub_operation} failed: {exc_val}",
                    exc_info=True,
                )
            self.collector.errors.append((self.sub_operation, exc_val))
            return True
