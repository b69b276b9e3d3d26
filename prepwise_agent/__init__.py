"""
PrepWise Agent: voice interview session controller.

Drives a real-time voice interview call, accumulates its transcript and, once
the call ends, either requests feedback for the interview or synthesizes a new
interview from the conversation.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.controller import SessionController
from .interview.models import SessionContext, SessionMode, CallState

__all__ = ["SessionController", "SessionContext", "SessionMode", "CallState"]
