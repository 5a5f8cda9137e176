"""Audio blob encoding and data-URL text conversion.

Recordings are stored as FLAC bytes wrapped in a ``data:`` URL so they can
live inside the JSON snapshot. Decoding accepts anything libsndfile reads.
"""

import base64
import binascii
import io
import logging
from typing import Optional

import numpy as np
import numpy.typing as npt
import soundfile as sf

from ..exceptions import DecodeError
from ..utils.audio import resample_linear
from .data import AudioData

logger = logging.getLogger(__name__)

DEFAULT_MIME = "audio/flac"

_EXTENSION_BY_MIME = {
    "audio/flac": "flac",
    "audio/x-flac": "flac",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/ogg": "ogg",
    "audio/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
}


def encode_frames(
    frames: npt.NDArray[np.float32],
    sample_rate: int,
    format: str = "FLAC",
    subtype: str = "PCM_16",
) -> bytes:
    """
    Encode float32 frames into an in-memory audio file.

    Args:
        frames: Samples, (frames,) or (frames, channels)
        sample_rate: Sample rate in Hz
        format: libsndfile container format
        subtype: libsndfile sample encoding

    Returns:
        Encoded file bytes
    """
    buffer = io.BytesIO()
    sf.write(buffer, frames, sample_rate, format=format, subtype=subtype)
    return buffer.getvalue()


def decode_bytes(raw: bytes, target_sample_rate: Optional[int] = None) -> AudioData:
    """
    Decode audio file bytes into AudioData.

    Args:
        raw: Encoded audio (FLAC, WAV, OGG, ...)
        target_sample_rate: If set, resample to this rate

    Returns:
        Decoded AudioData

    Raises:
        DecodeError: If the bytes are not audio or contain no frames
    """
    if not raw:
        raise DecodeError("empty payload", num_bytes=0)

    try:
        with sf.SoundFile(io.BytesIO(raw)) as f:
            source_format = f.format
            sample_rate = f.samplerate
            data = f.read(dtype="float32")
    except (RuntimeError, TypeError, ValueError) as e:
        # LibsndfileError derives from RuntimeError
        raise DecodeError(str(e), num_bytes=len(raw)) from e

    if len(data) == 0:
        raise DecodeError("no audio frames", num_bytes=len(raw))

    if target_sample_rate and sample_rate != target_sample_rate:
        logger.debug(f"Resampling {sample_rate} Hz -> {target_sample_rate} Hz")
        data = resample_linear(data, sample_rate, target_sample_rate)
        sample_rate = target_sample_rate

    return AudioData.from_array(data, sample_rate, format=source_format)


def to_data_url(raw: bytes, mime: str = DEFAULT_MIME) -> str:
    """Wrap bytes in a base64 ``data:`` URL."""
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


def from_data_url(text: str) -> tuple[str, bytes]:
    """
    Split a base64 ``data:`` URL into its MIME type and payload.

    Raises:
        ValueError: If the text is not a base64 data URL
    """
    if not text.startswith("data:") or "," not in text:
        raise ValueError("not a data URL")

    header, payload = text[5:].split(",", 1)
    params = header.split(";")
    if "base64" not in params[1:]:
        raise ValueError("data URL is not base64 encoded")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 payload: {e}") from e

    return params[0] or "application/octet-stream", raw


def extension_for_mime(mime: str) -> str:
    """File extension for an audio MIME type (``bin`` when unknown)."""
    base = mime.split(";", 1)[0].strip().lower()
    if base in _EXTENSION_BY_MIME:
        return _EXTENSION_BY_MIME[base]
    if base.startswith("audio/"):
        return base.split("/", 1)[1] or "bin"
    return "bin"
