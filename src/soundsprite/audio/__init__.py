"""Audio primitives: decoded buffers, voices, mixing and blob codecs.

The output device, microphone capture and engine live in `audio.device`,
`audio.capture` and `audio.engine`; import them directly (they load
sounddevice, which needs PortAudio).
"""

from .codec import decode_bytes, encode_frames, extension_for_mime, from_data_url, to_data_url
from .data import AudioData, LiveVoice, Voice
from .mixer import AudioMixer

__all__ = [
    "AudioData",
    "AudioMixer",
    "LiveVoice",
    "Voice",
    "decode_bytes",
    "encode_frames",
    "extension_for_mime",
    "from_data_url",
    "to_data_url",
]
