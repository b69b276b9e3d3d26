#!/usr/bin/env python3
"""
Main entry point for the PrepWise session controller.
Replays a recorded voice engine event log through a real session:

    python -m prepwise_agent events.json [--generate|--interview] [--candidate-id=ID]
        [--candidate-name=NAME] [--interview-id=ID] [--feedback-id=ID] [--save]
"""
import json
import sys
from dataclasses import asdict

from .config import get_config
from .interview.controller import SessionController
from .interview.models import (
    SessionContext, SessionMode, FeedbackRequest, InterviewSpec,
    FeedbackResult, InterviewCreationResult
)
from .infrastructure.voice import LocalVoiceEngine
from .infrastructure.persistence import PersistenceService, PersistenceRestClient
from .utils import setup_logging


class DryRunPersistence(PersistenceService):
    """Prints what would be stored instead of calling the backend."""

    def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        print(f"📝 Would request feedback for interview {request.interview_id} "
              f"({len(request.transcript)} transcript lines)")
        return FeedbackResult(success=True, feedback_id="dry-run")

    def create_interview(self, spec: InterviewSpec) -> InterviewCreationResult:
        print("📝 Would create interview:")
        print(json.dumps(asdict(spec), indent=2, default=str))
        return InterviewCreationResult(success=True)


def _option(name: str, default=None):
    prefix = f"--{name}="
    for arg in sys.argv[1:]:
        if arg.startswith(prefix):
            return arg[len(prefix):]
    return default


def main():
    """Command-line interface for replaying a recorded call."""
    paths = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    if len(paths) != 1:
        print(__doc__.strip())
        sys.exit(2)

    save = "--save" in sys.argv
    mode = SessionMode.INTERVIEW if "--interview" in sys.argv else SessionMode.GENERATE

    # Load configuration from environment; the workflow id only matters when saving
    try:
        config = get_config(require_workflow=save and mode == SessionMode.GENERATE)
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    setup_logging(config.log_file, config.log_level)

    try:
        with open(paths[0], "r", encoding="utf-8") as f:
            events = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Could not read event log {paths[0]}: {e}")
        sys.exit(1)

    if not isinstance(events, list):
        print("❌ Event log must be a JSON list of events")
        sys.exit(1)

    try:
        context = SessionContext(
            mode=mode,
            candidate_name=_option("candidate-name", ""),
            candidate_id=_option("candidate-id"),
            interview_id=_option("interview-id"),
            feedback_id=_option("feedback-id"),
        )
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    persistence = (
        PersistenceRestClient(config.persistence_base_url, config.persistence_timeout)
        if save else DryRunPersistence()
    )

    # Recorded logs carry their own call-start/call-end events
    engine = LocalVoiceEngine(emit_call_start_on_start=False, emit_call_end_on_stop=False)

    with SessionController(context, engine, persistence, workflow_id=config.workflow_id) as controller:
        controller.begin_call()
        count = engine.replay(events)
        controller.end_call()

        print(f"🎙️  Replayed {count} events, {len(controller.transcript)} transcript lines kept")
        print(f"➡️  Next view: {controller.navigation.path if controller.navigation else '/'}")
        print(f"📈 Session metrics: {controller.get_metrics()}")


if __name__ == "__main__":
    main()
