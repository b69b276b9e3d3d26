"""
Data models for the interview session.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from ..config import GENERATE_SESSION_TYPE, HOME_PATH, FEEDBACK_PATH_TEMPLATE


class CallState(str, Enum):
    """Lifecycle of a single voice call. Transitions only move forward."""
    IDLE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class Speaker(str, Enum):
    """Who produced a transcript line, using the voice engine's role names."""
    CANDIDATE = "user"
    SYSTEM = "system"
    INTERVIEWER = "assistant"


class SessionMode(str, Enum):
    """What a session produces when the call ends."""
    GENERATE = "generate"
    INTERVIEW = "interview"

    @classmethod
    def from_type(cls, value: Optional[str]) -> "SessionMode":
        """Map a caller-supplied session type; anything but "generate" is an interview."""
        if (value or "").strip().lower() == GENERATE_SESSION_TYPE:
            return cls.GENERATE
        return cls.INTERVIEW


@dataclass(frozen=True)
class TranscriptEntry:
    """One finalized utterance."""
    speaker: Speaker
    text: str


@dataclass(frozen=True)
class InterviewSpec:
    """Interview structure synthesized from a free-form transcript."""
    role: str
    level: str
    interview_type: str
    tech_stack: Tuple[str, ...]
    questions: Tuple[str, ...]
    candidate_id: str
    finalized: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class FeedbackRequest:
    """Everything the persistence service needs to generate feedback for an interview."""
    interview_id: str
    candidate_id: str
    transcript: Tuple[TranscriptEntry, ...]
    feedback_id: Optional[str] = None


@dataclass(frozen=True)
class SessionContext:
    """Creation-time parameters of one session. The mode never changes afterwards."""
    mode: SessionMode
    candidate_name: str = ""
    candidate_id: Optional[str] = None
    interview_id: Optional[str] = None
    feedback_id: Optional[str] = None
    questions: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.mode == SessionMode.INTERVIEW and not self.interview_id:
            raise ValueError("interview sessions require an interview_id")
        # Accept any sequence from callers but store it immutably
        object.__setattr__(self, "questions", tuple(self.questions or ()))


class NavigationTarget(str, Enum):
    """Views the caller may be sent to after a session ends."""
    HOME = "home"
    FEEDBACK = "feedback"


@dataclass(frozen=True)
class NavigationIntent:
    """Where the UI layer should go once termination handling is done."""
    target: NavigationTarget
    path: str

    @classmethod
    def home(cls) -> "NavigationIntent":
        return cls(NavigationTarget.HOME, HOME_PATH)

    @classmethod
    def feedback(cls, interview_id: str) -> "NavigationIntent":
        return cls(NavigationTarget.FEEDBACK, FEEDBACK_PATH_TEMPLATE.format(interview_id=interview_id))


class DispatchAction(str, Enum):
    """What to do with a session once it has finished."""
    CREATE_FEEDBACK = "create_feedback"
    CREATE_INTERVIEW = "create_interview"
    SKIP = "skip"


@dataclass(frozen=True)
class TerminationDispatch:
    """One-shot decision produced by the state machine when the call finishes."""
    action: DispatchAction
    feedback_request: Optional[FeedbackRequest] = None
    interview_spec: Optional[InterviewSpec] = None
    reason: str = ""


@dataclass(frozen=True)
class FeedbackResult:
    """Outcome of a create-feedback call."""
    success: bool
    feedback_id: Optional[str] = None


@dataclass(frozen=True)
class InterviewCreationResult:
    """Outcome of a create-interview call."""
    success: bool
    error: Optional[str] = None
