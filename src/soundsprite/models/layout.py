"""Fixed pad bank and step grid dimensions, and the keyboard layout."""

NUM_PADS = 9
NUM_STEPS = 4

# One key per pad, home row left to right
PAD_KEYS = ("A", "S", "D", "F", "G", "H", "J", "K", "L")

DEFAULT_PAD_NAME = "Empty"
DEFAULT_VOLUME = 1.0

DEFAULT_BPM = 100
MIN_BPM = 30
MAX_BPM = 300


def key_for_index(pad_index: int) -> str:
    """
    Get the keyboard key mapped to a pad.

    Raises:
        IndexError: If pad_index is out of range
    """
    if not 0 <= pad_index < NUM_PADS:
        raise IndexError(f"Pad index {pad_index} out of range (0-{NUM_PADS - 1})")
    return PAD_KEYS[pad_index]


def index_for_key(key: str) -> int | None:
    """Get the pad mapped to a keyboard key (case-insensitive), or None."""
    try:
        return PAD_KEYS.index(key.upper())
    except ValueError:
        return None


def empty_grid() -> list[list[bool]]:
    """Create an all-off pad x step grid."""
    return [[False] * NUM_STEPS for _ in range(NUM_PADS)]


def clamp_bpm(bpm: int) -> int:
    """Clamp a tempo to the supported range."""
    return max(MIN_BPM, min(MAX_BPM, int(bpm)))
