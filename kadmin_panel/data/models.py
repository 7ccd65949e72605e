"""Typed views over kadmin backend payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _safe_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _headers(raw: Any) -> Dict[str, str]:
    # the backend emits a key -> value map; older builds emit [{key, value}]
    if isinstance(raw, dict):
        return {str(key): "" if value is None else str(value) for key, value in raw.items()}
    headers: Dict[str, str] = {}
    if isinstance(raw, list):
        for entry in raw:
            if isinstance(entry, dict) and "key" in entry:
                value = entry.get("value")
                headers[str(entry["key"])] = "" if value is None else str(value)
    return headers


@dataclass
class MessageRecord:
    """A single message as returned by the read endpoint."""

    key: Optional[str]
    message: Any
    write_time: Optional[int]
    offset: Optional[int]
    partition: Optional[int]
    topic: Optional[str]
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MessageRecord":
        return cls(
            key=_text(payload.get("key")),
            message=payload.get("message"),
            write_time=_safe_int(payload.get("writeTime")),
            offset=_safe_int(payload.get("offset")),
            partition=_safe_int(payload.get("partition")),
            topic=_text(payload.get("topic")),
            headers=_headers(payload.get("headers")),
        )


@dataclass
class MessagePage:
    """One page of buffered messages plus the consumer's running total."""

    content: List[MessageRecord]
    total_elements: int
    page: int = 0
    size: int = 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MessagePage":
        content = [MessageRecord.from_payload(item) for item in payload.get("content") or [] if isinstance(item, dict)]
        return cls(
            content=content,
            total_elements=_safe_int(payload.get("totalElements")) or 0,
            page=_safe_int(payload.get("page")) or 0,
            size=_safe_int(payload.get("size")) or len(content),
        )


@dataclass
class ReadResult:
    """Response of the read endpoint: the backend consumer id and its page."""

    consumer_id: Optional[str]
    page: MessagePage

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ReadResult":
        page_payload = payload.get("page")
        if not isinstance(page_payload, dict):
            page_payload = payload
        consumer_id = payload.get("consumerId")
        return cls(consumer_id=str(consumer_id) if consumer_id else None, page=MessagePage.from_payload(page_payload))


@dataclass
class DeserializerInfo:
    id: str
    name: str


@dataclass
class ConsumerInfo:
    """Summary of a consumer held open by the backend."""

    consumer_group_id: str
    topic: Optional[str]
    deserializer_id: Optional[str]
    deserializer_name: Optional[str]
    last_message_time: Optional[int]
    last_used_time: Optional[int]
    queue_size: Optional[int]
    total: Optional[int]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ConsumerInfo":
        return cls(
            consumer_group_id=str(payload.get("consumerGroupId") or ""),
            topic=_text(payload.get("topic")),
            deserializer_id=_text(payload.get("deserializerId")),
            deserializer_name=_text(payload.get("deserializerName")),
            last_message_time=_safe_int(payload.get("lastMessageTime")),
            last_used_time=_safe_int(payload.get("lastUsedTime")),
            queue_size=_safe_int(payload.get("queueSize")),
            total=_safe_int(payload.get("total")),
        )


__all__ = ["MessageRecord", "MessagePage", "ReadResult", "DeserializerInfo", "ConsumerInfo"]
