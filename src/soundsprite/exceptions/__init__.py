"""
Custom exception hierarchy for SoundSprite.

## Exception Hierarchy

```
SoundSpriteError (base)
├── AudioError
│   ├── AudioDeviceError
│   └── DecodeError
├── RecordingError
│   ├── MicrophonePermissionError (also a PermissionError)
│   ├── UnsupportedError
│   └── AlreadyRecordingError
├── NoSampleError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

Out-of-range pad or step indices raise the builtin `IndexError`.

All custom exceptions inherit from `SoundSpriteError`, which provides:

- `user_message`: Human-friendly message for display to users
- `technical_message`: Detailed message for logging
- `recoverable`: Whether the error can be recovered from
- `recovery_hint`: Optional suggestion for how to fix the issue

### Example: Rejected second recording

```python
from soundsprite.exceptions import AlreadyRecordingError

try:
    await recorder.start(3)
except AlreadyRecordingError as e:
    print(e.get_full_message())
# Already recording into pad 0.
#
# Suggestion: Stop the current recording before starting a new one.
```
"""

from .audio import AudioDeviceError, AudioError, DecodeError
from .base import NoSampleError, SoundSpriteError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorCollector,
    collect_errors,
    format_error_for_display,
    wrap_audio_device_error,
    wrap_capture_error,
    wrap_pydantic_error,
)
from .recording import (
    AlreadyRecordingError,
    MicrophonePermissionError,
    RecordingError,
    UnsupportedError,
)

__all__ = [
    # Recording
    "AlreadyRecordingError",
    # Audio
    "AudioDeviceError",
    "AudioError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "DecodeError",
    # Handlers
    "ErrorCollector",
    "MicrophonePermissionError",
    "NoSampleError",
    "RecordingError",
    # Base
    "SoundSpriteError",
    "UnsupportedError",
    "collect_errors",
    "format_error_for_display",
    "wrap_audio_device_error",
    "wrap_capture_error",
    "wrap_pydantic_error",
]
