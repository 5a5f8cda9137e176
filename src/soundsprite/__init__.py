"""SoundSprite: a 9-pad soundboard with microphone recording and a 4-step sequencer."""

__version__ = "0.1.0"

from .core.application import Soundboard

__all__ = ["Soundboard"]
