"""Generic utility modules for soundsprite.

- observer: Thread-safe observer list
- paths: File name and size formatting
- persistence: Atomic JSON writes and Pydantic model load/save
"""

from .observer import ObserverManager
from .paths import format_bytes, safe_filename

__all__ = ["ObserverManager", "format_bytes", "safe_filename"]
