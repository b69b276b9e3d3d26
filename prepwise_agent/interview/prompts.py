"""
Interviewer assistant definition and question-list formatting.

Prompt text is kept here, away from the session logic, so it can be edited
without touching the controller.
"""
import copy
from typing import Any, Dict, Optional, Sequence

QUESTIONS_PLACEHOLDER = "{{questions}}"


class InterviewPrompts:
    """Collection of interviewer prompts."""

    @staticmethod
    def first_message() -> str:
        return (
            "Hello! Thank you for taking the time to speak with me today. "
            "I'm excited to learn more about you and your experience."
        )

    @staticmethod
    def interviewer_system_prompt() -> str:
        """System prompt for the interviewer; the question list is substituted by the voice engine."""
        return f"""
You are a professional job interviewer conducting a real-time voice interview with a candidate.
Your goal is to assess their qualifications, motivation, and fit for the role.

Interview guidelines:
Follow the structured question flow:
{QUESTIONS_PLACEHOLDER}

Engage naturally and react appropriately:
- Listen to each answer and acknowledge it before moving on.
- Ask a brief follow-up question if an answer is vague or needs more detail.
- Keep the conversation flowing while staying in control of it.

Be professional, yet warm and welcoming:
- Use polite, official language, but stay friendly.
- Keep every response short and to the point, like in a real voice interview.

Answer the candidate's questions about the role, the company or the process if you know the answer,
otherwise direct them to HR for more details.

Conclude the interview properly:
- Thank the candidate for their time.
- Tell them the company will reach out soon with feedback.
- End the conversation on a polite and positive note.
        """.strip()


class PromptFormatter:
    """Helpers for formatting prompt variables."""

    @staticmethod
    def format_questions(questions: Optional[Sequence[str]]) -> str:
        """Render questions one per line, bullet-prefixed. No questions renders as ""."""
        if not questions:
            return ""
        return "\n".join(f"- {question}" for question in questions)


_INTERVIEWER_ASSISTANT: Dict[str, Any] = {
    "name": "Interviewer",
    "firstMessage": InterviewPrompts.first_message(),
    "transcriber": {
        "provider": "deepgram",
        "model": "nova-2",
        "language": "en",
    },
    "voice": {
        "provider": "11labs",
        "voiceId": "sarah",
        "stability": 0.4,
        "similarityBoost": 0.8,
        "speed": 0.9,
        "style": 0.5,
        "useSpeakerBoost": True,
    },
    "model": {
        "provider": "openai",
        "model": "gpt-4",
        "messages": [
            {"role": "system", "content": InterviewPrompts.interviewer_system_prompt()},
        ],
    },
}


def interviewer_assistant() -> Dict[str, Any]:
    """A fresh copy of the interviewer assistant definition."""
    return copy.deepcopy(_INTERVIEWER_ASSISTANT)

