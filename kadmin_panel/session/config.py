"""Consumer session parameters and form validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

SINCE_BEGINNING = -1


class ValidationErrorKind(str, Enum):
    MISSING_TOPIC = "missing_topic"
    MISSING_DESERIALIZER = "missing_deserializer"
    INVALID_REFRESH_INTERVAL = "invalid_refresh_interval"
    INVALID_QUEUE_SIZE = "invalid_queue_size"


class ValidationError(ValueError):
    """Raised when submitted form values cannot start a session."""

    def __init__(self, kind: ValidationErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(detail or kind.value)


@dataclass(frozen=True)
class SessionConfig:
    """Parameters for one consumer session.

    Attributes:
        topic: Topic to read; never empty.
        deserializer_id: Backend deserializer used to render message values.
        started: True while the session is live.
        source_url: Optional broker URL overriding the backend default.
        schema_url: Optional schema registry URL.
        key_filter: Optional key filter expression.
        message_filter: Optional message filter expression.
        since: Epoch milliseconds of the last fetch, or ``SINCE_BEGINNING``.
        refresh_interval_ms: Auto-refresh cadence; ``0`` disables polling.
        queue_size: Optional cap on the server-side message buffer.
    """

    topic: str
    deserializer_id: str
    started: bool = False
    source_url: Optional[str] = None
    schema_url: Optional[str] = None
    key_filter: Optional[str] = None
    message_filter: Optional[str] = None
    since: int = SINCE_BEGINNING
    refresh_interval_ms: int = 0
    queue_size: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "deserializer_id": self.deserializer_id,
            "started": self.started,
            "source_url": self.source_url,
            "schema_url": self.schema_url,
            "key_filter": self.key_filter,
            "message_filter": self.message_filter,
            "since": self.since,
            "refresh_interval_ms": self.refresh_interval_ms,
            "queue_size": self.queue_size,
        }


_FIELD_ALIASES = {
    "topic": ("topic",),
    "deserializer_id": ("deserializer_id", "deserializerId"),
    "source_url": ("source_url", "sourceUrl"),
    "schema_url": ("schema_url", "schemaUrl"),
    "key_filter": ("key_filter", "keyFilter"),
    "message_filter": ("message_filter", "messageFilter"),
    "refresh_interval_ms": ("refresh_interval_ms", "refreshIntervalMs"),
    "queue_size": ("queue_size", "size"),
}


def _lookup(form: Mapping[str, Any], field: str) -> Any:
    for alias in _FIELD_ALIASES[field]:
        if alias in form:
            return form[alias]
    return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_int(value: Any, kind: ValidationErrorKind) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise ValidationError(kind, f"expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(kind, f"expected an integer, got {value!r}") from None


def build_config(form: Mapping[str, Any]) -> SessionConfig:
    """Validate raw form values and return a started ``SessionConfig``.

    Empty optional fields become ``None`` so an empty filter and no filter
    produce the same backend request.
    """

    topic = _optional_text(_lookup(form, "topic"))
    if topic is None:
        raise ValidationError(ValidationErrorKind.MISSING_TOPIC, "Topic is required")

    deserializer_id = _optional_text(_lookup(form, "deserializer_id"))
    if deserializer_id is None:
        raise ValidationError(ValidationErrorKind.MISSING_DESERIALIZER, "Deserializer is required")

    interval = _parse_int(_lookup(form, "refresh_interval_ms"), ValidationErrorKind.INVALID_REFRESH_INTERVAL)
    queue_size = _parse_int(_lookup(form, "queue_size"), ValidationErrorKind.INVALID_QUEUE_SIZE)
    if queue_size is not None and queue_size <= 0:
        raise ValidationError(ValidationErrorKind.INVALID_QUEUE_SIZE, "Queue size must be positive")

    return SessionConfig(
        topic=topic,
        deserializer_id=deserializer_id,
        started=True,
        source_url=_optional_text(_lookup(form, "source_url")),
        schema_url=_optional_text(_lookup(form, "schema_url")),
        key_filter=_optional_text(_lookup(form, "key_filter")),
        message_filter=_optional_text(_lookup(form, "message_filter")),
        since=SINCE_BEGINNING,
        refresh_interval_ms=max(0, interval or 0),
        queue_size=queue_size,
    )


__all__ = [
    "SINCE_BEGINNING",
    "SessionConfig",
    "ValidationError",
    "ValidationErrorKind",
    "build_config",
]
