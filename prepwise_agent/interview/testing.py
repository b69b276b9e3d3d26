"""
Testing infrastructure with mock collaborators for the session controller.
"""
from typing import Any, Dict, List, Optional, Tuple

from .models import (
    FeedbackRequest, InterviewSpec, FeedbackResult, InterviewCreationResult,
    TranscriptEntry, Speaker
)
from .errors import PersistenceError
from .events import VoiceEvent, VoiceEventType
from ..infrastructure.voice import LocalVoiceEngine
from ..infrastructure.persistence import PersistenceService


class MockVoiceEngine(LocalVoiceEngine):
    """
    Voice engine for tests: records commands and only emits what the test pushes.

    Unlike LocalVoiceEngine it does not emit call-start/call-end on its own, so
    tests decide exactly when lifecycle events arrive.
    """

    def __init__(self, fail_on_start: bool = False):
        super().__init__(emit_call_start_on_start=False, emit_call_end_on_stop=False)
        self.fail_on_start = fail_on_start

    def start(self, target, variables: Dict[str, Any]) -> None:
        if self.fail_on_start:
            raise RuntimeError("mock engine refused to start")
        super().start(target, variables)

    def call_start(self) -> None:
        self.emit(VoiceEvent(VoiceEventType.CALL_START))

    def call_end(self) -> None:
        self.in_call = False
        self.emit(VoiceEvent(VoiceEventType.CALL_END))

    def speech_start(self) -> None:
        self.emit(VoiceEvent(VoiceEventType.SPEECH_START))

    def speech_end(self) -> None:
        self.emit(VoiceEvent(VoiceEventType.SPEECH_END))

    @property
    def last_start(self) -> Optional[Tuple[Any, Dict[str, Any]]]:
        return self.started_with[-1] if self.started_with else None


class MockPersistenceService(PersistenceService):
    """Persistence service that records requests and returns canned results."""

    def __init__(self,
                 feedback_result: Optional[FeedbackResult] = None,
                 interview_result: Optional[InterviewCreationResult] = None,
                 raise_error: bool = False):
        self.feedback_result = feedback_result or FeedbackResult(success=True, feedback_id="feedback-1")
        self.interview_result = interview_result or InterviewCreationResult(success=True)
        self.raise_error = raise_error
        self.feedback_requests: List[FeedbackRequest] = []
        self.created_interviews: List[InterviewSpec] = []

    @property
    def call_count(self) -> int:
        return len(self.feedback_requests) + len(self.created_interviews)

    def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        self.feedback_requests.append(request)
        if self.raise_error:
            raise PersistenceError("mock feedback failure")
        return self.feedback_result

    def create_interview(self, spec: InterviewSpec) -> InterviewCreationResult:
        self.created_interviews.append(spec)
        if self.raise_error:
            raise PersistenceError("mock interview failure")
        return self.interview_result


def create_test_transcript() -> List[TranscriptEntry]:
    """A generate-session transcript where the workflow summarises what it heard."""
    return [
        TranscriptEntry(Speaker.INTERVIEWER, "Hi! What role would you like to practise for?"),
        TranscriptEntry(Speaker.CANDIDATE, "A backend engineer position, senior level."),
        TranscriptEntry(Speaker.INTERVIEWER, "Role: Backend Engineer, Level: Senior, Type: Technical"),
        TranscriptEntry(Speaker.INTERVIEWER, "Tech stack: Python, PostgreSQL, Kafka"),
        TranscriptEntry(
            Speaker.INTERVIEWER,
            "Here are your questions:\n1. How does Kafka guarantee ordering?\n2. Explain MVCC in PostgreSQL.",
        ),
    ]


def create_recorded_call_events() -> List[Dict[str, Any]]:
    """Raw engine events for a short generate call, as a recording would hold them."""
    events: List[Dict[str, Any]] = [{"event": "call-start"}]
    for entry in create_test_transcript():
        events.append({
            "event": "message", "type": "transcript", "transcriptType": "partial",
            "role": entry.speaker.value, "transcript": entry.text[:10],
        })
        events.append({
            "event": "message", "type": "transcript", "transcriptType": "final",
            "role": entry.speaker.value, "transcript": entry.text,
        })
    events.append({"event": "call-end"})
    return events
