"""Path and size formatting helpers."""

import re

# Characters that are unsafe in file names on at least one common platform
_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def format_bytes(size_bytes: int) -> str:
    """
    Format byte size as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "512 KB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def safe_filename(name: str, fallback: str) -> str:
    """
    Turn a display name into a file name.

    Unsafe characters become underscores; a name that ends up blank
    uses the fallback.
    """
    cleaned = _UNSAFE_CHARS.sub("_", name).strip().strip(".")
    return cleaned or fallback
