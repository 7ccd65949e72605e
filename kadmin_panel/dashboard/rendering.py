"""Turn message pages into display-ready rows."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from kadmin_panel.data.models import MessagePage, MessageRecord


@dataclass
class RenderedMessage:
    uid: str
    key: Optional[str]
    offset: Optional[int]
    partition: Optional[int]
    write_time_text: str
    message_text: str
    headers_text: str


@dataclass
class RenderedPage:
    title: str
    total_elements: int
    messages: List[RenderedMessage]


def format_time(epoch_ms: Optional[int]) -> str:
    if epoch_ms is None or epoch_ms < 0:
        return ""
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc).strftime("%H:%M:%S")


def format_payload(message: Any) -> str:
    if message is None:
        return "null"
    if isinstance(message, (dict, list)):
        return json.dumps(message, indent=2, sort_keys=True)
    return str(message)


def render_message(record: MessageRecord) -> RenderedMessage:
    headers = "\n".join(f"{key}: {value}" for key, value in record.headers.items())
    return RenderedMessage(
        uid=uuid.uuid4().hex[:8],
        key=record.key,
        offset=record.offset,
        partition=record.partition,
        write_time_text=format_time(record.write_time),
        message_text=format_payload(record.message),
        headers_text=headers.strip(),
    )


def render_page(topic: str, page: MessagePage) -> RenderedPage:
    """Render newest-first, titled with the consumer's running total."""

    return RenderedPage(
        title=f"({page.total_elements}) {topic}",
        total_elements=page.total_elements,
        messages=[render_message(record) for record in reversed(page.content)],
    )


__all__ = ["RenderedMessage", "RenderedPage", "format_payload", "format_time", "render_message", "render_page"]
