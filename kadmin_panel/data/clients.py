"""Client interfaces for the kadmin consumer backend."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Protocol

from kadmin_panel.data.models import ConsumerInfo, DeserializerInfo, ReadResult

if TYPE_CHECKING:
    from kadmin_panel.session.config import SessionConfig


@dataclass
class BackendEndpoint:
    """Connection details for a kadmin backend.

    Attributes:
        base_url: Scheme and host of the backend, e.g. ``http://localhost:8080``.
        context_path: Servlet context path the API is mounted under.
        timeout_seconds: Per-request timeout.
    """

    base_url: str
    context_path: str = ""
    timeout_seconds: float = 10.0

    @property
    def root(self) -> str:
        context = self.context_path.strip("/")
        base = self.base_url.rstrip("/")
        return f"{base}/{context}" if context else base


class BackendErrorKind(str, Enum):
    NETWORK_FAILURE = "network_failure"
    HTTP_STATUS = "http_status"


class BackendError(Exception):
    """A backend call that did not produce a usable response."""

    def __init__(self, kind: BackendErrorKind, url: str, status_code: Optional[int] = None, reason: str = "") -> None:
        self.kind = kind
        self.url = url
        self.status_code = status_code
        self.reason = reason
        super().__init__(self._describe())

    @classmethod
    def network_failure(cls, url: str, reason: str) -> "BackendError":
        return cls(BackendErrorKind.NETWORK_FAILURE, url, reason=reason)

    @classmethod
    def http_status(cls, url: str, status_code: int, reason: str = "") -> "BackendError":
        return cls(BackendErrorKind.HTTP_STATUS, url, status_code=status_code, reason=reason)

    def _describe(self) -> str:
        if self.kind is BackendErrorKind.HTTP_STATUS:
            return f"{self.url} returned HTTP {self.status_code}"
        return f"{self.url} unreachable: {self.reason}"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "url": self.url,
            "status_code": self.status_code,
            "reason": self.reason,
        }


class ConsumerBackend(Protocol):
    """Backend operations the session controller depends on.

    Implementations may be plain methods (run in a worker thread) or
    coroutines. Failures are raised as :class:`BackendError`.
    """

    def read(self, config: "SessionConfig") -> ReadResult:
        """Fetch the current page of messages for a session."""

    def truncate(self, session_id: str) -> None:
        """Clear the buffered messages of a backend consumer."""

    def dispose(self, session_id: str) -> None:
        """Shut down a backend consumer."""


class CatalogBackend(Protocol):
    """Lookup endpoints used to populate the session form."""

    def list_topics(self, source_url: Optional[str] = None) -> List[str]:
        """Return topic names known to the broker."""

    def list_deserializers(self) -> List[DeserializerInfo]:
        """Return registered deserializers."""

    def list_consumers(self) -> List[ConsumerInfo]:
        """Return consumers currently held open by the backend."""


__all__ = [
    "BackendEndpoint",
    "BackendError",
    "BackendErrorKind",
    "ConsumerBackend",
    "CatalogBackend",
]
