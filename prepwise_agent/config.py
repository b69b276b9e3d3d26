"""
PrepWise Agent Configuration
============================

This file contains ALL configuration for the voice interview session controller.
- User settings at the top (things deployments usually change)
- Internal constants at the bottom (policy defaults and wire paths)
"""
import os
from dataclasses import dataclass
from typing import Optional, Tuple


# =============================================================================
# USER SETTINGS - Override these with environment variables
# =============================================================================

# REQUIRED for generate sessions: the voice workflow that collects interview details
VAPI_WORKFLOW_ID = "your-workflow-id"  # Change this!

# Persistence backend
PERSISTENCE_BASE_URL = "http://localhost:3000"
PERSISTENCE_TIMEOUT = 30

# Logging
LOG_FILE = "./_sessions/session.log"
LOG_LEVEL = "INFO"


# =============================================================================
# EXTRACTION DEFAULTS - Used when a transcript carries no usable signal
# =============================================================================

DEFAULT_ROLE = "Software Developer"
DEFAULT_LEVEL = "All-level"
DEFAULT_INTERVIEW_TYPE = "Mixed"
DEFAULT_TECH_STACK: Tuple[str, ...] = ("JavaScript, React.js, node.js, mongodb,express",)
DEFAULT_QUESTION = "Tell me about yourself?"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless the backend changes
# =============================================================================

# Navigation
HOME_PATH = "/"
FEEDBACK_PATH_TEMPLATE = "/interview/{interview_id}/feedback"

# Persistence REST endpoints
FEEDBACK_ENDPOINT = "/api/feedback"
GENERATE_ENDPOINT = "/api/vapi/generate"

# Voice engine wire values
TRANSCRIPT_MESSAGE_TYPE = "transcript"
FINAL_TRANSCRIPT_TYPE = "final"
GENERATE_SESSION_TYPE = "generate"


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    workflow_id: str
    persistence_base_url: str = PERSISTENCE_BASE_URL
    persistence_timeout: int = PERSISTENCE_TIMEOUT
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL


def get_config(require_workflow: bool = True) -> Config:
    """Load configuration."""
    workflow_id = os.getenv("VAPI_WORKFLOW_ID") or VAPI_WORKFLOW_ID

    if require_workflow and workflow_id == "your-workflow-id":
        raise ValueError("Please set VAPI_WORKFLOW_ID in config.py or as environment variable")

    timeout_raw: Optional[str] = os.getenv("PERSISTENCE_TIMEOUT")
    try:
        timeout = int(timeout_raw) if timeout_raw else PERSISTENCE_TIMEOUT
    except ValueError:
        raise ValueError(f"PERSISTENCE_TIMEOUT must be an integer, got {timeout_raw!r}")

    return Config(
        workflow_id=workflow_id,
        persistence_base_url=(os.getenv("PERSISTENCE_BASE_URL") or PERSISTENCE_BASE_URL).rstrip("/"),
        persistence_timeout=timeout,
        log_file=os.getenv("LOG_FILE") or LOG_FILE,
        log_level=(os.getenv("LOG_LEVEL") or LOG_LEVEL).upper(),
    )
