"""REST client for the kadmin consumer backend.

Wraps the read, truncate and dispose endpoints used by a consumer session,
plus the topic, deserializer and consumer listings that populate the panel.
Transport failures and non-2xx responses are raised as
:class:`~kadmin_panel.data.clients.BackendError` so callers can surface them.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from kadmin_panel.data.clients import BackendEndpoint, BackendError
from kadmin_panel.data.models import ConsumerInfo, DeserializerInfo, ReadResult
from kadmin_panel.session.config import SessionConfig
from kadmin_panel.session.urls import (
    build_consumers_url,
    build_deserializers_url,
    build_dispose_url,
    build_request_url,
    build_topics_url,
    build_truncate_url,
)


class KadminClient:
    """Blocking client for the kadmin HTTP API."""

    def __init__(
        self,
        endpoint: Optional[BackendEndpoint] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.endpoint = endpoint or BackendEndpoint(base_url="http://localhost:8080")
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    # --- Session lifecycle -------------------------------------------------
    def read(self, config: SessionConfig) -> ReadResult:
        """Fetch the buffered messages for a session's topic."""

        payload = self._request("GET", build_request_url(config, self.endpoint.root))
        if not isinstance(payload, dict):
            payload = {}
        return ReadResult.from_payload(payload)

    def truncate(self, session_id: str) -> None:
        """Drop every message buffered for a backend consumer."""

        self._request("DELETE", build_truncate_url(session_id, self.endpoint.root), expect_body=False)

    def dispose(self, session_id: str) -> None:
        """Shut down a backend consumer and release its buffer."""

        self._request("DELETE", build_dispose_url(session_id, self.endpoint.root), expect_body=False)

    # --- Catalog -----------------------------------------------------------
    def list_topics(self, source_url: Optional[str] = None) -> List[str]:
        payload = self._request("GET", build_topics_url(self.endpoint.root, source_url))
        topics: Sequence[Any] = payload if isinstance(payload, list) else []
        return [str(name) for name in topics if name]

    def list_deserializers(self) -> List[DeserializerInfo]:
        payload = self._request("GET", build_deserializers_url(self.endpoint.root))
        return [
            DeserializerInfo(id=str(item["id"]), name=str(item.get("name") or item["id"]))
            for item in self._content(payload)
            if item.get("id")
        ]

    def list_consumers(self) -> List[ConsumerInfo]:
        payload = self._request("GET", build_consumers_url(self.endpoint.root))
        return [ConsumerInfo.from_payload(item) for item in self._content(payload)]

    # --- REST helpers ------------------------------------------------------
    def _content(self, payload: Any) -> List[Dict[str, Any]]:
        items = payload if isinstance(payload, list) else (payload or {}).get("content", [])
        return [item for item in items if isinstance(item, dict)]

    def _request(self, method: str, url: str, expect_body: bool = True) -> Any:
        try:
            response = self.session.request(
                method, url, headers={"Accept": "application/json"}, timeout=self.endpoint.timeout_seconds
            )
        except requests.RequestException as exc:
            self.logger.warning(
                "%s %s failed: %s", method, url, exc,
                extra={"event": "backend_unreachable", "method": method, "url": url},
            )
            raise BackendError.network_failure(url, str(exc)) from exc

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            self.logger.warning(
                "%s %s returned %s", method, url, response.status_code,
                extra={"event": "backend_http_error", "method": method, "url": url, "status_code": response.status_code},
            )
            raise BackendError.http_status(url, response.status_code, response.reason or "") from exc

        if not expect_body or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError.network_failure(url, f"invalid JSON body: {exc}") from exc


__all__ = ["KadminClient"]
