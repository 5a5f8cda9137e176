"""Tests for PadStore reads, mutations and edit events."""

import math
import threading
from unittest.mock import Mock

import pytest

from soundsprite.core.pad_store import PadStore, normalize_name, percent_to_gain
from soundsprite.models import Pad
from soundsprite.protocols import EditEvent, EditObserver


@pytest.fixture
def observer(pad_store):
    observer = Mock(spec=EditObserver)
    pad_store.register_observer(observer)
    return observer


@pytest.mark.unit
class TestHelpers:
    """Test name and volume normalization."""

    @pytest.mark.parametrize("raw,expected", [
        ("  Kick  ", "Kick"),
        ("", "Empty"),
        ("   ", "Empty"),
        (None, "Empty"),
    ])
    def test_normalize_name(self, raw, expected):
        assert normalize_name(raw) == expected

    @pytest.mark.parametrize("percent,gain", [
        (50, 0.5),
        (0, 0.0),
        (100, 1.0),
        (150, 1.5),
        ("75", 0.75),
        (-20, 0.0),
        (math.nan, 1.0),
        (math.inf, 1.0),
        ("loud", 1.0),
        (None, 1.0),
    ])
    def test_percent_to_gain(self, percent, gain):
        assert percent_to_gain(percent) == pytest.approx(gain)


@pytest.mark.unit
class TestPadStoreReads:
    """Test reading pads."""

    def test_starts_with_nine_empty_pads(self, pad_store):
        pads = pad_store.pads

        assert len(pads) == 9
        for pad in pads:
            assert pad.name == "Empty"
            assert pad.volume == 1.0
            assert pad.buffer is None
            assert pad.encoded_sample is None

    def test_get_returns_copy(self, pad_store):
        pad = pad_store.get(0)
        pad.name = "Changed"

        assert pad_store.get(0).name == "Empty"

    @pytest.mark.parametrize("index", [-1, 9, 100])
    def test_out_of_range_raises_index_error(self, pad_store, index):
        with pytest.raises(IndexError):
            pad_store.get(index)
        with pytest.raises(IndexError):
            pad_store.set_name(index, "x")
        with pytest.raises(IndexError):
            pad_store.set_volume(index, 50)
        with pytest.raises(IndexError):
            pad_store.clear(index)


@pytest.mark.unit
class TestPadStoreMutations:
    """Test mutations and their events."""

    def test_set_name(self, pad_store, observer):
        pad = pad_store.set_name(2, "  Snare ")

        assert pad.name == "Snare"
        assert pad_store.get(2).name == "Snare"
        event, indices, pads = observer.on_edit_event.call_args.args
        assert event == EditEvent.PAD_NAME_CHANGED
        assert indices == [2]
        assert pads[0].name == "Snare"

    def test_set_volume_percent(self, pad_store, observer):
        pad_store.set_volume(0, 50)

        assert pad_store.get(0).volume == 0.5
        assert observer.on_edit_event.call_args.args[0] == EditEvent.PAD_VOLUME_CHANGED

    def test_commit_replaces_audio_and_name(self, pad_store, observer, audio_data):
        pad_store.set_volume(3, 40)

        pad = pad_store.commit(3, audio_data, "data:audio/flac;base64,AAAA", "Sample F")

        assert pad.buffer is audio_data
        assert pad.encoded_sample == "data:audio/flac;base64,AAAA"
        assert pad.name == "Sample F"
        # Recording keeps the pad's volume
        assert pad.volume == 0.4
        assert observer.on_edit_event.call_args.args[0] == EditEvent.PAD_COMMITTED

    def test_commit_with_volume(self, pad_store):
        pad = pad_store.commit(1, None, "data:audio/flac;base64,AAAA", "Restored", volume=0.3)

        assert pad.volume == 0.3
        assert pad.buffer is None
        assert pad.has_recording
        assert not pad.is_playable

    def test_clear(self, pad_store, observer, audio_data):
        pad_store.commit(4, audio_data, "data:x;base64,", "Clap")
        pad_store.set_volume(4, 20)

        pad_store.clear(4)

        assert pad_store.get(4) == Pad.empty()
        assert observer.on_edit_event.call_args.args[0] == EditEvent.PAD_CLEARED

    def test_reset_all(self, pad_store, observer, audio_data):
        for index in range(9):
            pad_store.commit(index, audio_data, "data:x;base64,", f"Pad {index}")

        pad_store.reset_all()

        assert all(pad == Pad.empty() for pad in pad_store.pads)
        event, indices, _ = observer.on_edit_event.call_args.args
        assert event == EditEvent.PADS_RESET
        assert indices == list(range(9))

    def test_edits_on_different_pads_do_not_interfere(self, pad_store, audio_data):
        """Commits on one pad and renames on another apply whole."""

        def commit_loop():
            for i in range(200):
                pad_store.commit(3, audio_data, f"data:x;base64,{i}", "Take")

        def rename_loop():
            for i in range(200):
                pad_store.set_name(5, f"Name {i}")

        threads = [threading.Thread(target=commit_loop), threading.Thread(target=rename_loop)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert pad_store.get(5).name == "Name 199"
        assert pad_store.get(5).buffer is None
        pad3 = pad_store.get(3)
        assert pad3.name == "Take"
        assert pad3.encoded_sample == "data:x;base64,199"
