"""
Call lifecycle state machine for one interview session.
"""
import logging
from threading import Lock
from typing import Callable, List, Optional, Tuple

from .models import (
    CallState, Speaker, SessionContext, SessionMode, TranscriptEntry,
    FeedbackRequest, DispatchAction, TerminationDispatch
)
from .events import VoiceEvent, VoiceEventType, MessageEvent, ErrorEvent
from .extraction import TranscriptExtractor
from .errors import SessionStateError, VoiceEngineError

logger = logging.getLogger("state_machine")

TerminationHandler = Callable[[TerminationDispatch], None]


class SessionStateMachine:
    """
    Owns the call state and transcript of exactly one session.

    States move Idle -> Connecting -> Active -> Finished and never back. When
    the session reaches Finished a TerminationDispatch is computed from the
    transcript and handed to on_terminated, exactly once, no matter how many
    termination triggers (call-end events, end_call commands) arrive.
    """

    def __init__(self,
                 context: SessionContext,
                 on_terminated: Optional[TerminationHandler] = None,
                 extractor: Optional[TranscriptExtractor] = None):
        self.context = context
        self.on_terminated = on_terminated
        self.extractor = extractor or TranscriptExtractor()

        self._lock = Lock()
        self._state = CallState.IDLE
        self._transcript: List[TranscriptEntry] = []
        self._is_speaking = False
        self._last_message = ""
        self._last_error: Optional[VoiceEngineError] = None
        self._dispatched = False
        self._dispatch: Optional[TerminationDispatch] = None

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def transcript(self) -> Tuple[TranscriptEntry, ...]:
        with self._lock:
            return tuple(self._transcript)

    @property
    def is_speaking(self) -> bool:
        return self._is_speaking

    @property
    def last_message(self) -> str:
        return self._last_message

    @property
    def last_error(self) -> Optional[VoiceEngineError]:
        return self._last_error

    @property
    def dispatch(self) -> Optional[TerminationDispatch]:
        """The dispatch made at termination, if the session has finished."""
        return self._dispatch

    # -------------------------
    # COMMANDS
    # -------------------------

    def begin_call(self) -> None:
        """
        Move from Idle to Connecting.

        Raises:
            SessionStateError: If the session has already left Idle
        """
        with self._lock:
            if self._state != CallState.IDLE:
                raise SessionStateError(f"Cannot begin a call from {self._state.value}")
            self._state = CallState.CONNECTING
        logger.info(f"Session ({self.context.mode.value}) connecting")

    def end_call(self) -> bool:
        """Force the session to Finished. Returns True if this call performed the transition."""
        return self._finish("end_call command")

    # -------------------------
    # VOICE ENGINE EVENTS
    # -------------------------

    def handle_event(self, event: VoiceEvent) -> None:
        """Route any voice engine event to its handler."""
        handler = {
            VoiceEventType.CALL_START: self.on_call_start,
            VoiceEventType.CALL_END: self.on_call_end,
            VoiceEventType.MESSAGE: self.on_message,
            VoiceEventType.SPEECH_START: self.on_speech_start,
            VoiceEventType.SPEECH_END: self.on_speech_end,
            VoiceEventType.ERROR: self.on_error,
        }[event.event_type]
        handler(event)

    def on_call_start(self, event: Optional[VoiceEvent] = None) -> None:
        with self._lock:
            if self._state != CallState.CONNECTING:
                logger.debug(f"Ignoring call-start in state {self._state.value}")
                return
            self._state = CallState.ACTIVE
        logger.info("Call active")

    def on_call_end(self, event: Optional[VoiceEvent] = None) -> None:
        self._finish("call-end event")

    def on_message(self, event: VoiceEvent) -> None:
        if not isinstance(event, MessageEvent) or not event.is_final_transcript:
            return

        try:
            speaker = Speaker(event.role)
        except ValueError:
            logger.warning(f"Dropping transcript line from unknown role {event.role!r}")
            return

        with self._lock:
            if self._state == CallState.FINISHED:
                logger.debug("Ignoring transcript after the session finished")
                return
            self._transcript.append(TranscriptEntry(speaker=speaker, text=event.transcript))
            self._last_message = event.transcript

    def on_speech_start(self, event: Optional[VoiceEvent] = None) -> None:
        logger.debug("speech start")
        self._is_speaking = True

    def on_speech_end(self, event: Optional[VoiceEvent] = None) -> None:
        logger.debug("speech end")
        self._is_speaking = False

    def on_error(self, event: VoiceEvent) -> None:
        message = event.message if isinstance(event, ErrorEvent) else str(event.data)
        details = event.data.get("details", {}) if isinstance(event, ErrorEvent) else dict(event.data)
        self._last_error = VoiceEngineError(message, details)
        logger.error(f"Voice engine error: {message}")

    # -------------------------
    # TERMINATION
    # -------------------------

    def _finish(self, trigger: str) -> bool:
        with self._lock:
            if self._dispatched:
                logger.debug(f"Already finished, ignoring {trigger}")
                return False
            self._dispatched = True
            self._state = CallState.FINISHED
            transcript = tuple(self._transcript)

        logger.info(f"Session finished by {trigger} with {len(transcript)} transcript lines")
        dispatch = self.build_dispatch(transcript)
        self._dispatch = dispatch
        if self.on_terminated is not None:
            self.on_terminated(dispatch)
        return True

    def build_dispatch(self, transcript: Tuple[TranscriptEntry, ...]) -> TerminationDispatch:
        """Decide what a finished session hands to the persistence service."""
        ctx = self.context

        if ctx.mode == SessionMode.INTERVIEW:
            return TerminationDispatch(
                action=DispatchAction.CREATE_FEEDBACK,
                feedback_request=FeedbackRequest(
                    interview_id=ctx.interview_id,
                    candidate_id=ctx.candidate_id or "",
                    transcript=transcript,
                    feedback_id=ctx.feedback_id,
                ),
            )

        if not transcript:
            return TerminationDispatch(action=DispatchAction.SKIP, reason="empty transcript")
        if not ctx.candidate_id:
            return TerminationDispatch(action=DispatchAction.SKIP, reason="unknown candidate")

        spec = self.extractor.extract(transcript, candidate_id=ctx.candidate_id)
        return TerminationDispatch(action=DispatchAction.CREATE_INTERVIEW, interview_spec=spec)
