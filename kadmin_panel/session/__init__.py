"""Consumer session configuration, polling and lifecycle control."""

from .config import SINCE_BEGINNING, SessionConfig, ValidationError, ValidationErrorKind, build_config
from .urls import build_permalink, build_request_url
from .polling import PollScheduler
from .controller import NoopSessionListener, SessionController, SessionListener, SessionState

__all__ = [
    "SINCE_BEGINNING",
    "SessionConfig",
    "ValidationError",
    "ValidationErrorKind",
    "build_config",
    "build_permalink",
    "build_request_url",
    "PollScheduler",
    "NoopSessionListener",
    "SessionController",
    "SessionListener",
    "SessionState",
]
