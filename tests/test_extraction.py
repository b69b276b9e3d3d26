from datetime import datetime, timezone

from prepwise_agent.config import DEFAULT_TECH_STACK
from prepwise_agent.interview.extraction import (
    ExtractedFields, TranscriptExtractor, extract_interview_spec,
    extract_listed_questions, scan_entry, scan_transcript
)
from prepwise_agent.interview.models import Speaker, TranscriptEntry
from prepwise_agent.interview.testing import create_test_transcript


def _agent(text: str) -> TranscriptEntry:
    return TranscriptEntry(Speaker.INTERVIEWER, text)


def _user(text: str) -> TranscriptEntry:
    return TranscriptEntry(Speaker.CANDIDATE, text)


def test_empty_transcript_yields_defaults():
    spec = extract_interview_spec([])

    assert spec.role == "Software Developer"
    assert spec.level == "All-level"
    assert spec.interview_type == "Mixed"
    assert spec.tech_stack == tuple(DEFAULT_TECH_STACK)
    assert len(spec.tech_stack) == 1
    assert spec.questions == ("Tell me about yourself?",)
    assert spec.finalized is True
    assert spec.created_at.tzinfo is not None


def test_last_role_wins():
    spec = extract_interview_spec([
        _user("role: Frontend Developer"),
        _user("something else entirely"),
        _agent("Role: Data Engineer"),
    ])

    assert spec.role == "Data Engineer"


def test_fields_are_independent():
    spec = extract_interview_spec([
        _agent("Role: Backend Engineer, Level: Senior"),
        _agent("Level: Junior"),
    ])

    assert spec.role == "Backend Engineer"
    assert spec.level == "Junior"
    assert spec.interview_type == "Mixed"


def test_labels_match_case_insensitively():
    spec = extract_interview_spec([_user("ROLE: SRE\nTYPE: Behavioural\nLEVEL: Mid")])

    assert spec.role == "SRE"
    assert spec.interview_type == "Behavioural"
    assert spec.level == "Mid"


def test_value_stops_at_comma_or_newline():
    spec = extract_interview_spec([_agent("Role: Platform Engineer, remote\nLevel: Staff")])

    assert spec.role == "Platform Engineer"
    assert spec.level == "Staff"


def test_tech_stack_is_split_and_trimmed():
    spec = extract_interview_spec([_user("Tech stack: Go, Rust, Python")])

    assert spec.tech_stack == ("Go", "Rust", "Python")


def test_tech_stack_last_match_wins():
    spec = extract_interview_spec([
        _user("Tech stack: Java"),
        _user("tech stack: Elixir ,  Phoenix"),
    ])

    assert spec.tech_stack == ("Elixir", "Phoenix")


def test_blank_role_value_rearms_default():
    spec = extract_interview_spec([_agent("Role: Architect"), _agent("Role: , later")])

    assert spec.role == "Software Developer"


def test_numbered_questions_are_extracted():
    spec = extract_interview_spec([_agent("1. What is a mutex?\n2. Explain backpressure.")])

    assert spec.questions == ("What is a mutex?", "Explain backpressure.")


def test_bulleted_questions_are_extracted():
    assert extract_listed_questions("Questions:\n- Why Rust?\n  - What is ownership?") == [
        "Why Rust?",
        "What is ownership?",
    ]


def test_text_without_list_marker_has_no_questions():
    assert extract_listed_questions("2. is not a first item") == []


def test_later_question_list_replaces_earlier():
    spec = extract_interview_spec([
        _agent("1. First question?\n2. Second question?"),
        _agent("- Only this one"),
    ])

    assert spec.questions == ("Only this one",)


def test_list_marker_without_items_keeps_previous_questions():
    spec = extract_interview_spec([
        _agent("1. Keep me"),
        _user("well - it depends"),
    ])

    assert spec.questions == ("Keep me",)


def test_interviewer_questions_fallback():
    spec = extract_interview_spec([
        _agent("Welcome!\nWhat do you want to practise? "),
        _user("Do candidates ask questions too?"),
        _agent("Great.\nHow many questions should I prepare?"),
    ])

    assert spec.questions == ("What do you want to practise?", "How many questions should I prepare?")


def test_candidate_id_and_timestamp_are_carried():
    created = datetime(2026, 1, 2, tzinfo=timezone.utc)

    spec = TranscriptExtractor().extract(create_test_transcript(), candidate_id="user-9", created_at=created)

    assert spec.candidate_id == "user-9"
    assert spec.created_at == created
    assert spec.role == "Backend Engineer"
    assert spec.level == "Senior"
    assert spec.interview_type == "Technical"
    assert spec.tech_stack == ("Python", "PostgreSQL", "Kafka")
    assert spec.questions == ("How does Kafka guarantee ordering?", "Explain MVCC in PostgreSQL.")


def test_scan_is_a_reduction_over_entries():
    entries = [_agent("Role: A"), _agent("Level: B"), _agent("Role: C")]

    fields = scan_transcript(entries)

    assert fields == ExtractedFields(role="C", level="B")
    assert scan_entry(ExtractedFields(), _user("nothing here")) == ExtractedFields()
