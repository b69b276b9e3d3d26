"""Infrastructure components for the session controller.

This module contains the adapters to the external collaborators: the voice
engine that runs the call and the backend that stores its outcome.
"""

from .voice import VoiceEngine, LocalVoiceEngine
from .persistence import PersistenceService, PersistenceRestClient

__all__ = [
    "VoiceEngine", "LocalVoiceEngine",
    "PersistenceService", "PersistenceRestClient"
]
