import pytest

from prepwise_agent.interview.controller import SessionController
from prepwise_agent.interview.errors import SessionStateError, VoiceEngineError
from prepwise_agent.interview.events import VoiceEventType
from prepwise_agent.interview.models import (
    CallState, FeedbackResult, InterviewCreationResult, NavigationTarget, SessionContext, SessionMode
)
from prepwise_agent.interview.testing import (
    MockPersistenceService, MockVoiceEngine, create_test_transcript
)

WORKFLOW_ID = "workflow-123"


def _controller(context, engine, persistence, navigations=None):
    return SessionController(
        context, engine, persistence,
        workflow_id=WORKFLOW_ID,
        on_navigate=navigations.append if navigations is not None else None,
    )


def _say_transcript(engine):
    for entry in create_test_transcript():
        engine.say(entry.speaker.value, entry.text)


def test_subscribes_every_event_and_releases_on_close(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)

    for event_type in VoiceEventType:
        assert engine.bus.handler_count(event_type) == 1
    assert controller.is_subscribed

    controller.close()
    controller.close()

    assert engine.bus.handler_count() == 0
    assert not controller.is_subscribed


def test_context_manager_releases_mid_call(generate_context, engine, persistence):
    with _controller(generate_context, engine, persistence) as controller:
        controller.begin_call()
        engine.call_start()
        assert controller.call_state == CallState.ACTIVE

    assert engine.bus.handler_count() == 0
    assert persistence.call_count == 0


def test_generate_start_uses_workflow_variables(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)

    controller.begin_call()

    assert controller.call_state == CallState.CONNECTING
    assert engine.last_start == (WORKFLOW_ID, {"username": "Ada", "userid": "user-1"})


def test_interview_start_renders_question_list(interview_context, engine, persistence):
    controller = _controller(interview_context, engine, persistence)

    controller.begin_call()

    target, variables = engine.last_start
    assert target["name"] == "Interviewer"
    assert variables == {"questions": "- What is a mutex?\n- Explain backpressure."}


def test_interview_without_questions_renders_empty_section(engine, persistence):
    context = SessionContext(mode=SessionMode.INTERVIEW, candidate_id="user-1", interview_id="i-1")
    controller = _controller(context, engine, persistence)

    controller.begin_call()

    assert engine.last_start[1] == {"questions": ""}


def test_generate_requires_workflow_id(generate_context, engine, persistence):
    with pytest.raises(ValueError):
        SessionController(generate_context, engine, persistence)


def test_begin_call_while_active_is_rejected(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)
    controller.begin_call()
    engine.call_start()

    with pytest.raises(SessionStateError):
        controller.begin_call()


def test_begin_call_after_close_is_rejected(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)
    controller.close()

    with pytest.raises(SessionStateError):
        controller.begin_call()


def test_engine_start_failure_is_reported(generate_context, persistence):
    engine = MockVoiceEngine(fail_on_start=True)
    controller = _controller(generate_context, engine, persistence)

    with pytest.raises(VoiceEngineError):
        controller.begin_call()


def test_generate_session_creates_interview(generate_context, engine, persistence):
    navigations = []
    controller = _controller(generate_context, engine, persistence, navigations)

    controller.begin_call()
    engine.call_start()
    _say_transcript(engine)
    engine.call_end()

    assert controller.call_state == CallState.FINISHED
    assert len(persistence.created_interviews) == 1
    spec = persistence.created_interviews[0]
    assert spec.role == "Backend Engineer"
    assert spec.candidate_id == "user-1"
    assert [n.target for n in navigations] == [NavigationTarget.HOME]
    assert controller.navigation.path == "/"


def test_generate_failure_still_navigates_home(generate_context, engine):
    persistence = MockPersistenceService(interview_result=InterviewCreationResult(success=False, error="boom"))
    controller = _controller(generate_context, engine, persistence)

    controller.begin_call()
    engine.call_start()
    _say_transcript(engine)
    controller.end_call()

    assert len(persistence.created_interviews) == 1
    assert controller.navigation.target == NavigationTarget.HOME


def test_generate_with_empty_transcript_skips_persistence(generate_context, engine, persistence):
    navigations = []
    controller = _controller(generate_context, engine, persistence, navigations)

    controller.begin_call()
    engine.call_start()
    controller.end_call()

    assert persistence.call_count == 0
    assert [n.target for n in navigations] == [NavigationTarget.HOME]


def test_interview_success_navigates_to_feedback(interview_context, engine, persistence):
    controller = _controller(interview_context, engine, persistence)

    controller.begin_call()
    engine.call_start()
    engine.say("assistant", "What is a mutex?")
    engine.say("user", "A lock for mutual exclusion.")
    controller.end_call()

    request = persistence.feedback_requests[0]
    assert [entry.text for entry in request.transcript] == [
        "What is a mutex?", "A lock for mutual exclusion."
    ]
    assert controller.navigation.target == NavigationTarget.FEEDBACK
    assert controller.navigation.path == "/interview/interview-42/feedback"


def test_interview_feedback_without_id_navigates_home(interview_context, engine):
    persistence = MockPersistenceService(feedback_result=FeedbackResult(success=True, feedback_id=None))
    controller = _controller(interview_context, engine, persistence)

    controller.begin_call()
    controller.end_call()

    assert len(persistence.feedback_requests) == 1
    assert controller.navigation.target == NavigationTarget.HOME


def test_persistence_exception_navigates_home(interview_context, engine):
    persistence = MockPersistenceService(raise_error=True)
    controller = _controller(interview_context, engine, persistence)

    controller.begin_call()
    engine.call_start()
    controller.end_call()

    assert controller.call_state == CallState.FINISHED
    assert controller.navigation.target == NavigationTarget.HOME


def test_end_call_and_late_call_end_dispatch_once(interview_context, engine, persistence):
    navigations = []
    controller = _controller(interview_context, engine, persistence, navigations)

    controller.begin_call()
    engine.call_start()
    controller.end_call()
    engine.call_end()
    controller.end_call()

    assert len(persistence.feedback_requests) == 1
    assert len(navigations) == 1
    assert engine.stop_count == 1


def test_engine_error_does_not_change_state(interview_context, engine, persistence):
    controller = _controller(interview_context, engine, persistence)
    controller.begin_call()
    engine.call_start()

    engine.fail("network hiccup")

    assert controller.call_state == CallState.ACTIVE
    assert persistence.call_count == 0
    assert controller.get_metrics()["engine_errors"] == 1


def test_observables_follow_events(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)
    controller.begin_call()
    engine.call_start()

    engine.speech_start()
    assert controller.is_speaking is True
    engine.say("assistant", "Hello", final=False)
    engine.say("assistant", "Hello there")
    engine.speech_end()

    assert controller.is_speaking is False
    assert controller.last_message == "Hello there"
    assert len(controller.transcript) == 1
    assert controller.get_metrics()["ignored_messages"] == 1
    assert controller.get_metrics()["final_messages"] == 1


def test_retry_after_finished_starts_new_session(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)
    controller.begin_call()
    engine.call_start()
    engine.say("user", "Role: Tester")
    engine.call_end()
    assert controller.navigation is not None

    controller.begin_call()

    assert controller.call_state == CallState.CONNECTING
    assert controller.transcript == ()
    assert controller.navigation is None
    assert len(engine.started_with) == 2
    assert engine.bus.handler_count() == len(VoiceEventType)


def test_failed_start_can_be_retried_without_saving(interview_context, persistence):
    engine = MockVoiceEngine(fail_on_start=True)
    controller = _controller(interview_context, engine, persistence)

    with pytest.raises(VoiceEngineError):
        controller.begin_call()
    assert controller.call_state == CallState.IDLE

    engine.fail_on_start = False
    controller.begin_call()

    assert controller.call_state == CallState.CONNECTING
    assert persistence.call_count == 0
    assert controller.navigation is None


def test_late_call_end_from_previous_call_does_not_finish_retry(interview_context, engine, persistence):
    controller = _controller(interview_context, engine, persistence)
    controller.begin_call()
    engine.call_start()
    engine.say("user", "A lock.")
    controller.end_call()
    assert len(persistence.feedback_requests) == 1

    controller.begin_call()
    engine.call_end()
    assert controller.call_state == CallState.CONNECTING

    engine.call_start()
    assert controller.call_state == CallState.ACTIVE
    assert len(persistence.feedback_requests) == 1

    engine.call_end()
    assert controller.call_state == CallState.FINISHED
    assert len(persistence.feedback_requests) == 2


def test_stop_pending_is_cleared_by_next_call_start(generate_context, engine, persistence):
    controller = _controller(generate_context, engine, persistence)
    controller.begin_call()
    engine.call_start()
    controller.end_call()

    # Engine never acknowledged the stop; the next call's end must still count
    controller.begin_call()
    engine.call_start()
    engine.call_end()

    assert controller.call_state == CallState.FINISHED
    assert controller.get_metrics()["calls_ended"] == 1
