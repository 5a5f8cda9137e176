"""Tests for audio blob encoding, decoding and data URLs."""

import base64

import numpy as np
import pytest

from soundsprite.audio.codec import (
    decode_bytes,
    encode_frames,
    extension_for_mime,
    from_data_url,
    to_data_url,
)
from soundsprite.exceptions import DecodeError


@pytest.mark.unit
class TestDecode:
    """Test decoding audio bytes."""

    def test_flac_round_trip_preserves_shape(self, sample_audio_array, flac_bytes):
        """Encoded recording decodes to the same duration and channel count."""
        audio = decode_bytes(flac_bytes)

        assert audio.num_channels == 1
        assert audio.num_frames == len(sample_audio_array)
        assert audio.sample_rate == 44100
        assert audio.format == "FLAC"
        # 16-bit quantization only
        assert np.allclose(audio.data, sample_audio_array, atol=1e-3)

    def test_stereo_round_trip(self, tone):
        mono = tone(0.05)
        stereo = np.column_stack([mono, mono * 0.5])

        audio = decode_bytes(encode_frames(stereo, 44100))

        assert audio.num_channels == 2
        assert audio.num_frames == len(mono)

    def test_resamples_to_target_rate(self, tone):
        raw = encode_frames(tone(0.1, sample_rate=22050), 22050)

        audio = decode_bytes(raw, target_sample_rate=44100)

        assert audio.sample_rate == 44100
        assert audio.num_frames == pytest.approx(4410, abs=2)
        assert audio.duration == pytest.approx(0.1, abs=1e-3)

    def test_wav_is_accepted(self, sample_audio_array):
        raw = encode_frames(sample_audio_array, 44100, format="WAV")
        assert decode_bytes(raw).format == "WAV"

    def test_garbage_raises_decode_error(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_bytes(b"definitely not audio" * 10)

        assert exc_info.value.num_bytes == 200
        assert "decode" in exc_info.value.user_message.lower()

    def test_empty_bytes_raise_decode_error(self):
        with pytest.raises(DecodeError):
            decode_bytes(b"")

    def test_zero_frames_raise_decode_error(self):
        raw = encode_frames(np.zeros(0, dtype=np.float32), 44100, format="WAV")

        with pytest.raises(DecodeError) as exc_info:
            decode_bytes(raw)

        assert exc_info.value.reason == "no audio frames"
        assert "no audio frames" in exc_info.value.technical_message


@pytest.mark.unit
class TestDataUrl:
    """Test textual encoding of recordings."""

    def test_round_trip(self, flac_bytes):
        text = to_data_url(flac_bytes)

        assert text.startswith("data:audio/flac;base64,")
        assert from_data_url(text) == ("audio/flac", flac_bytes)

    def test_browser_style_mime_with_codecs(self):
        """Data URLs saved with codec parameters still parse."""
        payload = base64.b64encode(b"abc").decode()
        mime, raw = from_data_url(f"data:audio/webm;codecs=opus;base64,{payload}")

        assert mime == "audio/webm"
        assert raw == b"abc"

    @pytest.mark.parametrize("text", [
        "not a url",
        "data:audio/flac,plain-text",
        "data:audio/flac;base64,***",
    ])
    def test_malformed_raises_value_error(self, text):
        with pytest.raises(ValueError):
            from_data_url(text)


@pytest.mark.unit
class TestMimeHelpers:
    """Test MIME and extension lookups."""

    @pytest.mark.parametrize("mime,ext", [
        ("audio/flac", "flac"),
        ("audio/webm;codecs=opus", "webm"),
        ("audio/x-wav", "wav"),
        ("audio/aiff", "aiff"),
        ("application/octet-stream", "bin"),
    ])
    def test_extension_for_mime(self, mime, ext):
        assert extension_for_mime(mime) == ext
