"""Voice engine interface."""

from .engine import VoiceEngine, LocalVoiceEngine

__all__ = ["VoiceEngine", "LocalVoiceEngine"]
