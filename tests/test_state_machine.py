"""Tests for the pad activity state machine and its events."""

import threading
import unittest
from unittest.mock import Mock

from soundsprite.core.state_machine import PadActivityStateMachine
from soundsprite.protocols import PlaybackEvent, StateObserver


class TestPadActivityStateMachine(unittest.TestCase):
    """Test activity pulse tracking."""

    def test_create_state_machine(self):
        """Test creating a state machine."""
        machine = PadActivityStateMachine()
        assert machine.get_active_pads() == []
        assert machine.pulse_duration == 0.22

    def test_pad_triggered_event(self):
        """Test pad triggered event."""
        machine = PadActivityStateMachine(pulse_duration=10)
        observer = Mock(spec=StateObserver)
        machine.register_observer(observer)

        machine.notify_pad_triggered(5)

        observer.on_playback_event.assert_called_once_with(PlaybackEvent.PAD_TRIGGERED, 5)
        assert machine.is_pad_active(5)
        machine.shutdown()

    def test_zero_duration_ends_pulse_immediately(self):
        """Test that a zero-length pulse starts and ends synchronously."""
        machine = PadActivityStateMachine(pulse_duration=0)
        observer = Mock(spec=StateObserver)
        machine.register_observer(observer)

        machine.notify_pad_triggered(2)

        assert [c.args for c in observer.on_playback_event.call_args_list] == [
            (PlaybackEvent.PAD_TRIGGERED, 2),
            (PlaybackEvent.PAD_PULSE_ENDED, 2),
        ]
        assert not machine.is_pad_active(2)

    def test_pulse_ends_after_duration(self):
        """Test that the pulse-ended event arrives from the timer."""
        machine = PadActivityStateMachine(pulse_duration=0.02)
        ended = threading.Event()

        class Observer:
            def on_playback_event(self, event, pad_index):
                if event == PlaybackEvent.PAD_PULSE_ENDED:
                    ended.set()

        machine.register_observer(Observer())
        machine.notify_pad_triggered(1)

        assert ended.wait(timeout=2.0)
        assert not machine.is_pad_active(1)

    def test_retrigger_extends_pulse(self):
        """Test that only the latest trigger's timer ends the pulse."""
        machine = PadActivityStateMachine(pulse_duration=10)
        observer = Mock(spec=StateObserver)
        machine.register_observer(observer)

        machine.notify_pad_triggered(3)
        machine.notify_pad_triggered(3)
        # The first trigger's generation is stale
        machine._end_pulse(3, 1)

        assert machine.is_pad_active(3)
        ended = [c for c in observer.on_playback_event.call_args_list
                 if c.args[0] == PlaybackEvent.PAD_PULSE_ENDED]
        assert ended == []
        machine.shutdown()

    def test_multiple_pads_active(self):
        """Test tracking multiple active pads."""
        machine = PadActivityStateMachine(pulse_duration=10)

        machine.notify_pad_triggered(0)
        machine.notify_pad_triggered(8)
        machine.notify_pad_triggered(4)

        assert machine.get_active_pads() == [0, 4, 8]
        machine.shutdown()
        assert machine.get_active_pads() == []

    def test_observer_exception_does_not_propagate(self):
        """Test that a failing observer doesn't affect others."""
        machine = PadActivityStateMachine(pulse_duration=0)
        bad = Mock(spec=StateObserver)
        bad.on_playback_event.side_effect = RuntimeError("observer failed")
        good = Mock(spec=StateObserver)
        machine.register_observer(bad)
        machine.register_observer(good)

        machine.notify_pad_triggered(6)

        good.on_playback_event.assert_any_call(PlaybackEvent.PAD_TRIGGERED, 6)
