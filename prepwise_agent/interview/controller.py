"""
Session controller: the outward surface of a voice interview session.
"""
import logging
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple, TYPE_CHECKING

from .models import (
    CallState, SessionContext, SessionMode, TranscriptEntry,
    NavigationIntent, DispatchAction, TerminationDispatch
)
from .events import (
    VoiceEvent, VoiceEventType, EventSubscription, EventLogger, SessionMetrics
)
from .extraction import TranscriptExtractor
from .state_machine import SessionStateMachine
from .prompts import PromptFormatter, interviewer_assistant
from .errors import SessionStateError, VoiceEngineError

if TYPE_CHECKING:
    from ..infrastructure.voice import VoiceEngine
    from ..infrastructure.persistence import PersistenceService

logger = logging.getLogger("session_controller")

NavigationHandler = Callable[[NavigationIntent], None]


class SessionController:
    """
    Drives one voice interview session against a voice engine.

    The controller subscribes to every voice engine event on construction and
    releases all of those subscriptions in close(). Use it as a context
    manager so teardown happens even when a call is abandoned.

    When the call finishes the state machine hands over a TerminationDispatch;
    the controller stores the outcome through the persistence service and
    publishes where the UI should go next. Persistence failures never
    propagate: they resolve to the home view.
    """

    def __init__(self,
                 context: SessionContext,
                 voice_engine: 'VoiceEngine',
                 persistence: 'PersistenceService',
                 workflow_id: Optional[str] = None,
                 on_navigate: Optional[NavigationHandler] = None,
                 extractor: Optional[TranscriptExtractor] = None,
                 assistant: Optional[Dict[str, Any]] = None):

        if context.mode == SessionMode.GENERATE and not workflow_id:
            raise ValueError("workflow_id is required for generate sessions")

        self.context = context
        self.voice_engine = voice_engine
        self.persistence = persistence
        self.workflow_id = workflow_id
        self.on_navigate = on_navigate
        self.extractor = extractor or TranscriptExtractor()
        self.assistant = assistant or interviewer_assistant()

        self.event_logger = EventLogger(logging.DEBUG)
        self.metrics = SessionMetrics()

        self._navigation: Optional[NavigationIntent] = None
        self._state_machine = self._new_state_machine()
        self._closed = False

        # Set by end_call() until the engine's own call-end comes back
        self._stop_lock = Lock()
        self._stop_pending = False

        # One handler per event type, released together in close()
        self._subscription = EventSubscription(
            voice_engine,
            {event_type: self._handle_voice_event for event_type in VoiceEventType}
        ).bind()

    # -------------------------
    # OBSERVABLES
    # -------------------------

    @property
    def call_state(self) -> CallState:
        return self._state_machine.state

    @property
    def is_speaking(self) -> bool:
        return self._state_machine.is_speaking

    @property
    def last_message(self) -> str:
        return self._state_machine.last_message

    @property
    def transcript(self) -> Tuple[TranscriptEntry, ...]:
        return self._state_machine.transcript

    @property
    def navigation(self) -> Optional[NavigationIntent]:
        return self._navigation

    @property
    def last_dispatch(self) -> Optional[TerminationDispatch]:
        return self._state_machine.dispatch

    @property
    def is_subscribed(self) -> bool:
        return self._subscription.active

    def get_metrics(self) -> Dict[str, int]:
        """Get current session metrics."""
        return self.metrics.get_metrics()

    # -------------------------
    # COMMANDS
    # -------------------------

    def begin_call(self) -> None:
        """
        Start a call. Allowed from Idle, or from Finished to retry with a new session.

        Raises:
            SessionStateError: If a call is already connecting or active, or the controller is closed
            VoiceEngineError: If the voice engine refuses to start
        """
        if self._closed:
            raise SessionStateError("Controller has been closed")

        state = self._state_machine.state
        if state == CallState.FINISHED:
            logger.info("Previous session finished, starting a new one")
            self._state_machine = self._new_state_machine()
            self._navigation = None
        elif state != CallState.IDLE:
            raise SessionStateError(f"Cannot begin a call while {state.value}")

        self._state_machine.begin_call()
        target, variables = self._start_arguments()

        try:
            self.voice_engine.start(target, variables)
        except Exception as e:
            logger.error(f"Voice engine failed to start: {e}")
            # No call happened, so back to Idle without a dispatch
            self._state_machine = self._new_state_machine()
            raise VoiceEngineError(f"Failed to start call: {e}") from e

    def end_call(self) -> None:
        """Finish the session and stop the voice engine. Does nothing once finished."""
        state = self._state_machine.state
        if state == CallState.FINISHED:
            logger.debug("end_call ignored, session already finished")
            return

        if state in (CallState.CONNECTING, CallState.ACTIVE):
            with self._stop_lock:
                self._stop_pending = True

        try:
            self._state_machine.end_call()
        finally:
            try:
                self.voice_engine.stop()
            except Exception as e:
                logger.error(f"Voice engine failed to stop: {e}")

    def close(self) -> None:
        """Release every voice engine subscription."""
        if self._closed:
            return
        self._closed = True
        if self._state_machine.state in (CallState.CONNECTING, CallState.ACTIVE):
            logger.warning(f"Controller closed while call {self._state_machine.state.value}")
        self._subscription.release()
        logger.debug("Session controller closed")

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------
    # INTERNALS
    # -------------------------

    def _new_state_machine(self) -> SessionStateMachine:
        return SessionStateMachine(
            self.context,
            on_terminated=self._handle_termination,
            extractor=self.extractor,
        )

    def _start_arguments(self) -> Tuple[Any, Dict[str, Any]]:
        """Target and variables for the voice engine start command."""
        ctx = self.context
        if ctx.mode == SessionMode.GENERATE:
            return self.workflow_id, {
                "username": ctx.candidate_name,
                "userid": ctx.candidate_id,
            }
        return self.assistant, {
            "questions": PromptFormatter.format_questions(ctx.questions),
        }

    def _handle_voice_event(self, event: VoiceEvent) -> None:
        self.event_logger.handle_event(event)
        self.metrics.handle_event(event)
        if self._is_stop_ack(event):
            logger.info("Dropping call-end left over from the stopped call")
            return
        self._state_machine.handle_event(event)

    def _is_stop_ack(self, event: VoiceEvent) -> bool:
        """
        True for the engine's call-end answering our own stop().

        That event may arrive after a retry has already swapped in the next
        session, which must not be finished by it. A call-start means the
        engine moved on to the new call, so no acknowledgement is pending.
        """
        with self._stop_lock:
            if not self._stop_pending:
                return False
            if event.event_type == VoiceEventType.CALL_START:
                self._stop_pending = False
            elif event.event_type == VoiceEventType.CALL_END:
                self._stop_pending = False
                return True
            return False

    def _handle_termination(self, dispatch: TerminationDispatch) -> None:
        try:
            intent = self._persist(dispatch)
        except Exception as e:
            logger.error(f"Error saving session outcome: {e}")
            intent = NavigationIntent.home()
        self._navigate(intent)

    def _persist(self, dispatch: TerminationDispatch) -> NavigationIntent:
        if dispatch.action == DispatchAction.CREATE_FEEDBACK:
            request = dispatch.feedback_request
            logger.info(f"Generating feedback for interview {request.interview_id}")
            result = self.persistence.create_feedback(request)
            if result.success and result.feedback_id:
                return NavigationIntent.feedback(request.interview_id)
            logger.error("Error saving feedback")
            return NavigationIntent.home()

        if dispatch.action == DispatchAction.CREATE_INTERVIEW:
            result = self.persistence.create_interview(dispatch.interview_spec)
            if result.success:
                logger.info("Interview saved successfully")
            else:
                logger.error(f"Error saving interview: {result.error}")
            return NavigationIntent.home()

        logger.info(f"Nothing to save: {dispatch.reason}")
        return NavigationIntent.home()

    def _navigate(self, intent: NavigationIntent) -> None:
        self._navigation = intent
        logger.info(f"Navigating to {intent.path}")
        if self.on_navigate is not None:
            self.on_navigate(intent)
