"""
Persistence service interface and REST client for interview and feedback records.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ...interview.errors import PersistenceError
from ...interview.models import (
    FeedbackRequest, InterviewSpec, FeedbackResult, InterviewCreationResult
)
from ...interview.schemas import (
    CreateFeedbackPayload, CreateInterviewPayload,
    FeedbackResponse, InterviewCreationResponse,
    parse_response, dump_payload
)
from ...config import (
    PERSISTENCE_BASE_URL, PERSISTENCE_TIMEOUT, FEEDBACK_ENDPOINT, GENERATE_ENDPOINT
)

logger = logging.getLogger("persistence_client")


class PersistenceService(ABC):
    """Durable storage for session outcomes."""

    @abstractmethod
    def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        """Store a transcript and request feedback generation for an interview."""

    @abstractmethod
    def create_interview(self, spec: InterviewSpec) -> InterviewCreationResult:
        """Store a synthesized interview."""


class PersistenceRestClient(PersistenceService):
    """REST-based client for the interview backend."""

    def __init__(self,
                 base_url: str = PERSISTENCE_BASE_URL,
                 timeout: int = PERSISTENCE_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        payload = CreateFeedbackPayload.from_request(request)
        body = self._post(FEEDBACK_ENDPOINT, dump_payload(payload))
        result = self._parse(FeedbackResponse, body).to_result()
        logger.info(f"Feedback for interview {request.interview_id}: success={result.success}")
        return result

    def create_interview(self, spec: InterviewSpec) -> InterviewCreationResult:
        try:
            payload = CreateInterviewPayload.from_spec(spec)
        except ValueError as e:
            raise PersistenceError(f"Interview spec cannot be sent: {e}")
        body = self._post(GENERATE_ENDPOINT, dump_payload(payload))
        result = self._parse(InterviewCreationResponse, body).to_result()
        logger.info(f"Interview creation for {spec.candidate_id}: success={result.success}")
        return result

    def _post(self, path: str, body: Dict[str, Any]) -> Any:
        """POST JSON and return the decoded response body."""
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        poster = self.session.post if self.session is not None else requests.post

        try:
            resp = poster(url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Persistence request to %s failed: %s", url, e)
            raise PersistenceError(f"Request to {path} failed: {e}")

        if resp.status_code >= 400:
            raise PersistenceError(
                f"Persistence REST error {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise PersistenceError(f"Response from {path} is not JSON: {e}", status_code=resp.status_code)

    def _parse(self, model: type, body: Any):
        try:
            return parse_response(model, body)
        except ValueError as e:
            raise PersistenceError(str(e))
