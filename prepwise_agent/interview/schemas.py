"""
Wire schemas exchanged with the persistence backend.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import (
    FeedbackRequest, InterviewSpec, FeedbackResult, InterviewCreationResult
)


class TranscriptMessagePayload(BaseModel):
    """One transcript line as stored by the backend."""
    role: str
    content: str


class CreateFeedbackPayload(BaseModel):
    """Body of a create-feedback request."""
    model_config = ConfigDict(populate_by_name=True)

    interview_id: str = Field(alias="interviewId")
    user_id: str = Field(alias="userId")
    transcript: List[TranscriptMessagePayload]
    feedback_id: Optional[str] = Field(default=None, alias="feedbackId")

    @classmethod
    def from_request(cls, request: FeedbackRequest) -> "CreateFeedbackPayload":
        return cls(
            interview_id=request.interview_id,
            user_id=request.candidate_id,
            transcript=[
                TranscriptMessagePayload(role=entry.speaker.value, content=entry.text)
                for entry in request.transcript
            ],
            feedback_id=request.feedback_id,
        )


class CreateInterviewPayload(BaseModel):
    """Body of a generate-interview request; only a subset of the interview travels."""
    role: str
    level: str
    type: str
    techstack: str
    amount: int = Field(ge=1)
    userid: str

    @field_validator("role", "level", "type", "userid")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def from_spec(cls, spec: InterviewSpec) -> "CreateInterviewPayload":
        return cls(
            role=spec.role,
            level=spec.level,
            type=spec.interview_type,
            techstack=",".join(spec.tech_stack),
            amount=len(spec.questions),
            userid=spec.candidate_id,
        )


class FeedbackResponse(BaseModel):
    """Backend reply to a create-feedback request."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    feedback_id: Optional[str] = Field(default=None, alias="feedbackId")

    def to_result(self) -> FeedbackResult:
        return FeedbackResult(success=self.success, feedback_id=self.feedback_id)


class InterviewCreationResponse(BaseModel):
    """Backend reply to a generate-interview request."""
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    error: Optional[Any] = None

    def to_result(self) -> InterviewCreationResult:
        return InterviewCreationResult(
            success=self.success,
            error=None if self.error is None else str(self.error),
        )


def parse_response(model: type, raw: Any) -> BaseModel:
    """
    Validate a decoded JSON response body against a response model.

    Raises:
        ValueError: If the body does not match the model
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid response structure: {e}")


def dump_payload(payload: BaseModel) -> Dict[str, Any]:
    """Serialize a request payload using its wire field names."""
    return payload.model_dump(by_alias=True, mode="json")
