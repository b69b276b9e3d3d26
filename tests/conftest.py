import pytest

from prepwise_agent.interview.models import SessionContext, SessionMode
from prepwise_agent.interview.testing import MockVoiceEngine, MockPersistenceService


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("VAPI_WORKFLOW_ID", "PERSISTENCE_BASE_URL", "PERSISTENCE_TIMEOUT", "LOG_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def engine() -> MockVoiceEngine:
    return MockVoiceEngine()


@pytest.fixture
def persistence() -> MockPersistenceService:
    return MockPersistenceService()


@pytest.fixture
def generate_context() -> SessionContext:
    return SessionContext(mode=SessionMode.GENERATE, candidate_name="Ada", candidate_id="user-1")


@pytest.fixture
def interview_context() -> SessionContext:
    return SessionContext(
        mode=SessionMode.INTERVIEW,
        candidate_name="Ada",
        candidate_id="user-1",
        interview_id="interview-42",
        feedback_id="feedback-7",
        questions=("What is a mutex?", "Explain backpressure."),
    )
