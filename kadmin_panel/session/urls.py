"""URL builders for the kadmin backend API."""

from __future__ import annotations

from typing import List, Optional, Tuple
from urllib.parse import quote, urlencode

from .config import SessionConfig


def _join(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{path}"


def _query(params: List[Tuple[str, str]]) -> str:
    return urlencode(params, quote_via=quote)


def build_request_url(config: SessionConfig, base_url: str = "") -> str:
    """Return the read URL for a session.

    ``deserializerId`` always comes first; optional parameters follow in a
    fixed order and are left out entirely when unset.
    """

    params: List[Tuple[str, str]] = [("deserializerId", config.deserializer_id)]
    optional = (
        ("sourceUrl", config.source_url),
        ("schemaUrl", config.schema_url),
        ("keyFilter", config.key_filter),
        ("messageFilter", config.message_filter),
        ("size", str(config.queue_size) if config.queue_size is not None else None),
    )
    for name, value in optional:
        if value:
            params.append((name, value))
    path = f"/api/kafka/read/{quote(config.topic, safe='')}"
    return f"{_join(base_url, path)}?{_query(params)}"


def build_topics_url(base_url: str = "", source_url: Optional[str] = None) -> str:
    url = _join(base_url, "/api/topics")
    if source_url:
        url = f"{url}?{_query([('source-url', source_url)])}"
    return url


def build_deserializers_url(base_url: str = "") -> str:
    return _join(base_url, "/api/manager/deserializers")


def build_consumers_url(base_url: str = "") -> str:
    return _join(base_url, "/api/manager/consumers")


def build_dispose_url(session_id: str, base_url: str = "") -> str:
    return _join(base_url, f"/api/manager/consumers/{quote(session_id, safe='')}")


def build_truncate_url(session_id: str, base_url: str = "") -> str:
    return f"{build_dispose_url(session_id, base_url)}/truncate"


def build_permalink(config: SessionConfig, origin: str) -> str:
    """Shareable link that reopens the panel on the same topic and deserializer."""

    topic = quote(config.topic, safe="")
    deserializer = quote(config.deserializer_id, safe="")
    return _join(origin, f"/consumer/topic/{topic}/{deserializer}")


__all__ = [
    "build_request_url",
    "build_topics_url",
    "build_deserializers_url",
    "build_consumers_url",
    "build_dispose_url",
    "build_truncate_url",
    "build_permalink",
]
