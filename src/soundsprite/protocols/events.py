"""Domain events for the observer pattern.

This module defines events that can occur within the soundboard:
- Playback events: Visual activity pulses from the audio engine
- Edit events: Persistent pad mutations
- Sequencer events: Grid, tempo and transport changes
- Recorder events: Capture session state changes
"""

from enum import Enum


class PlaybackEvent(Enum):
    """Events from the audio engine's activity tracker."""

    PAD_TRIGGERED = "pad_triggered"    # Pad started sounding (pulse begins)
    PAD_PULSE_ENDED = "pad_pulse_ended"  # Activity pulse elapsed


class EditEvent(Enum):
    """
    Events that occur when pad state changes.

    These events represent PERSISTENT state changes (saved to the snapshot).
    """

    PAD_COMMITTED = "pad_committed"            # Recording assigned to pad
    PAD_NAME_CHANGED = "pad_name_changed"      # Pad renamed
    PAD_VOLUME_CHANGED = "pad_volume_changed"  # Volume changed
    PAD_CLEARED = "pad_cleared"                # Pad reset to default
    PADS_RESET = "pads_reset"                  # Every pad reset (reset-all)


class SequencerEvent(Enum):
    """Events from the step sequencer."""

    CELL_TOGGLED = "cell_toggled"    # Grid cell flipped (persistent)
    TEMPO_CHANGED = "tempo_changed"  # BPM changed (persistent)
    GRID_CLEARED = "grid_cleared"    # All cells off (persistent)
    RESET = "reset"                  # Grid and tempo back to defaults (persistent)
    STARTED = "started"              # Transport started
    STOPPED = "stopped"              # Transport stopped
    STEP = "step"                    # A step fired


class RecorderEvent(Enum):
    """Events from the recorder."""

    STATE_CHANGED = "state_changed"  # Idle/Capturing/Finalizing transition
    COMMITTED = "committed"          # Recording committed to a pad
    FAILED = "failed"                # Finalization failed, pad untouched
