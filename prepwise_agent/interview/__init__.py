"""Interview session components.

This module contains the session logic: the transcript extractor, the call
state machine and the controller that wires both to the voice engine and the
persistence service.
"""

# Controller
from .controller import SessionController

# State machine
from .state_machine import SessionStateMachine

# Extraction
from .extraction import TranscriptExtractor, extract_interview_spec

# Data models
from .models import (
    CallState, Speaker, SessionMode, SessionContext, TranscriptEntry,
    InterviewSpec, FeedbackRequest, FeedbackResult, InterviewCreationResult,
    NavigationIntent, NavigationTarget, DispatchAction, TerminationDispatch
)

# Event system
from .events import (
    VoiceEventBus, VoiceEventType, VoiceEvent, MessageEvent, ErrorEvent,
    EventSubscription, EventLogger, SessionMetrics
)

# Errors
from .errors import SessionError, SessionStateError, VoiceEngineError, PersistenceError

__all__ = [
    # Controller and state machine
    "SessionController", "SessionStateMachine",

    # Extraction
    "TranscriptExtractor", "extract_interview_spec",

    # Data models
    "CallState", "Speaker", "SessionMode", "SessionContext", "TranscriptEntry",
    "InterviewSpec", "FeedbackRequest", "FeedbackResult", "InterviewCreationResult",
    "NavigationIntent", "NavigationTarget", "DispatchAction", "TerminationDispatch",

    # Events
    "VoiceEventBus", "VoiceEventType", "VoiceEvent", "MessageEvent", "ErrorEvent",
    "EventSubscription", "EventLogger", "SessionMetrics",

    # Errors
    "SessionError", "SessionStateError", "VoiceEngineError", "PersistenceError",
]
