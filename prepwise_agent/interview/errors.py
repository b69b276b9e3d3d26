"""
Exceptions raised by the interview session components.
"""
from typing import Any, Dict, Optional


class SessionError(Exception):
    """Base class for session controller errors."""


class SessionStateError(SessionError):
    """A command was issued in a call state that does not allow it."""


class VoiceEngineError(SessionError):
    """Error reported by, or raised while talking to, the voice engine."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class PersistenceError(SessionError):
    """The persistence service failed to store a feedback or interview record."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
