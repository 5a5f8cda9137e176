"""Audio processing utilities."""

import numpy as np
import numpy.typing as npt


def ensure_array(value: np.float32 | npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """
    Ensure numpy operation result is an array.

    Some numpy operations like np.mean() can return either a scalar or an array
    depending on the input shape. This keeps the mixer's types consistent.

    Example:
        >>> result = np.mean(data, axis=1, dtype=np.float32)
        >>> array_result = ensure_array(result)
    """
    return value if isinstance(value, np.ndarray) else np.array([value], dtype=np.float32)


def resample_linear(
    data: npt.NDArray[np.float32],
    orig_sr: int,
    target_sr: int
) -> npt.NDArray[np.float32]:
    """
    Simple linear resampling.

    Args:
        data: Audio data, (frames,) or (frames, channels)
        orig_sr: Original sample rate
        target_sr: Target sample rate

    Returns:
        Resampled float32 audio data
    """
    if orig_sr == target_sr or len(data) == 0:
        return data

    new_length = max(1, int(len(data) * target_sr / orig_sr))
    x_old = np.linspace(0, 1, len(data))
    x_new = np.linspace(0, 1, new_length)

    if data.ndim == 1:
        return np.interp(x_new, x_old, data).astype(np.float32)

    resampled = np.zeros((new_length, data.shape[1]), dtype=np.float32)
    for ch in range(data.shape[1]):
        resampled[:, ch] = np.interp(x_new, x_old, data[:, ch])
    return resampled
