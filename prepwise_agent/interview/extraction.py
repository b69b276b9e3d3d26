"""
Heuristic extraction of interview structure from a conversation transcript.

Generate sessions talk the candidate through what they want to practise; the
voice workflow's summary lines ("Role: Backend Engineer, Level: Senior ...")
and enumerated question lists are scraped here into an InterviewSpec.

The scan is a reduction over the transcript: each entry produces an updated
ExtractedFields record where any field found in that entry replaces the
previous value (last match wins, independently per field). Defaults are applied
in a separate pass so that every field of the resulting spec is populated.
Extraction never raises; missing signal degrades to the configured defaults.
"""
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import InterviewSpec, Speaker, TranscriptEntry
from ..config import (
    DEFAULT_ROLE, DEFAULT_LEVEL, DEFAULT_INTERVIEW_TYPE,
    DEFAULT_TECH_STACK, DEFAULT_QUESTION
)

# label: value up to the first comma or newline
_ROLE_PATTERN = re.compile(r"role:\s*([^,\n]+)", re.IGNORECASE)
_LEVEL_PATTERN = re.compile(r"level:\s*([^,\n]+)", re.IGNORECASE)
_TYPE_PATTERN = re.compile(r"type:\s*([^,\n]+)", re.IGNORECASE)
# tech stack keeps its commas so the value can be split into items
_TECH_STACK_PATTERN = re.compile(r"tech stack:\s*([^\n]+)", re.IGNORECASE)

_LIST_MARKERS = ("1.", "- ")
_LIST_ITEM_PATTERN = re.compile(r"^(\d+\.|-)\s+.+")
_LIST_MARKER_PATTERN = re.compile(r"^(\d+\.|-)\s+")


@dataclass(frozen=True)
class ExtractedFields:
    """Partial record accumulated while scanning; None/empty means not found."""
    role: Optional[str] = None
    level: Optional[str] = None
    interview_type: Optional[str] = None
    tech_stack: Tuple[str, ...] = ()
    questions: Tuple[str, ...] = ()


def _match_value(pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def split_tech_stack(value: str) -> Tuple[str, ...]:
    """Split a comma separated stack into trimmed, non-empty items."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


def extract_listed_questions(text: str) -> List[str]:
    """
    Return the enumerated items of a numbered or bulleted list.

    Only texts containing "1." or "- " are considered lists at all.
    """
    if not any(marker in text for marker in _LIST_MARKERS):
        return []

    questions = []
    for line in text.split("\n"):
        stripped = line.strip()
        if _LIST_ITEM_PATTERN.match(stripped):
            questions.append(_LIST_MARKER_PATTERN.sub("", stripped).strip())
    return questions


def scan_entry(fields: ExtractedFields, entry: TranscriptEntry) -> ExtractedFields:
    """Fold one transcript entry into the accumulated fields."""
    text = entry.text or ""
    updates = {}

    role = _match_value(_ROLE_PATTERN, text)
    if role is not None:
        updates["role"] = role

    level = _match_value(_LEVEL_PATTERN, text)
    if level is not None:
        updates["level"] = level

    interview_type = _match_value(_TYPE_PATTERN, text)
    if interview_type is not None:
        updates["interview_type"] = interview_type

    stack = _match_value(_TECH_STACK_PATTERN, text)
    if stack is not None:
        updates["tech_stack"] = split_tech_stack(stack)

    questions = extract_listed_questions(text)
    if questions:
        # A later list replaces an earlier one rather than extending it
        updates["questions"] = tuple(questions)

    return replace(fields, **updates) if updates else fields


def scan_transcript(transcript: Iterable[TranscriptEntry]) -> ExtractedFields:
    """Reduce a whole transcript to the last value seen for each field."""
    return reduce(scan_entry, transcript, ExtractedFields())


def interviewer_questions(transcript: Iterable[TranscriptEntry]) -> List[str]:
    """Lines spoken by the interviewer that end with a question mark."""
    found = []
    for entry in transcript:
        if entry.speaker != Speaker.INTERVIEWER:
            continue
        for line in (entry.text or "").split("\n"):
            if line.strip().endswith("?"):
                found.append(line.strip())
    return found


def apply_defaults(fields: ExtractedFields,
                   transcript: Sequence[TranscriptEntry],
                   candidate_id: str = "",
                   created_at: Optional[datetime] = None) -> InterviewSpec:
    """Fill every empty field from the configured defaults and build the spec."""
    questions = fields.questions
    if not questions:
        questions = tuple(interviewer_questions(transcript)) or (DEFAULT_QUESTION,)

    return InterviewSpec(
        role=fields.role or DEFAULT_ROLE,
        level=fields.level or DEFAULT_LEVEL,
        interview_type=fields.interview_type or DEFAULT_INTERVIEW_TYPE,
        tech_stack=fields.tech_stack or tuple(DEFAULT_TECH_STACK),
        questions=questions,
        candidate_id=candidate_id,
        finalized=True,
        created_at=created_at or datetime.now(timezone.utc),
    )


def extract_interview_spec(transcript: Sequence[TranscriptEntry],
                           candidate_id: str = "",
                           created_at: Optional[datetime] = None) -> InterviewSpec:
    """Derive a fully populated InterviewSpec from an ordered transcript."""
    entries = list(transcript)
    return apply_defaults(scan_transcript(entries), entries, candidate_id, created_at)


class TranscriptExtractor:
    """Object wrapper so the extractor can be swapped out in a session."""

    def extract(self,
                transcript: Sequence[TranscriptEntry],
                candidate_id: str = "",
                created_at: Optional[datetime] = None) -> InterviewSpec:
        return extract_interview_spec(transcript, candidate_id, created_at)
