"""Core soundboard components.

`Soundboard` lives in `core.application`, which also pulls in the audio
engine and persistence layers.
"""

from .pad_store import PadStore
from .recorder import Recorder
from .sequencer import Sequencer
from .state_machine import PadActivityStateMachine

__all__ = ["PadActivityStateMachine", "PadStore", "Recorder", "Sequencer"]
