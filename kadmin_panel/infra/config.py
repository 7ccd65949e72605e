"""Config loading utilities for the consumer panel."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = "config/panel.yaml"


@dataclass
class BackendConfig:
    base_url: str = "http://localhost:8080"
    context_path: str = ""
    timeout_seconds: float = 10.0


@dataclass
class SessionDefaults:
    refresh_interval_ms: int = 0
    default_topic: Optional[str] = None
    default_deserializer_id: Optional[str] = None
    source_url: Optional[str] = None
    schema_url: Optional[str] = None
    queue_size: Optional[int] = None

    def form(self) -> Dict[str, Any]:
        """Form values a freshly opened panel starts with."""

        return {
            "topic": self.default_topic,
            "deserializer_id": self.default_deserializer_id,
            "source_url": self.source_url,
            "schema_url": self.schema_url,
            "queue_size": self.queue_size,
            "refresh_interval_ms": self.refresh_interval_ms,
        }

    @property
    def autostart(self) -> bool:
        return bool(self.default_topic and self.default_deserializer_id)


@dataclass
class DashboardConfig:
    host: str = "127.0.0.1"
    port: int = 8000
    enable: bool = True
    public_origin: Optional[str] = None


@dataclass
class PanelConfig:
    backend: BackendConfig = field(default_factory=BackendConfig)
    session: SessionDefaults = field(default_factory=SessionDefaults)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    log_level: str = "INFO"


def load_config(path: str | Path | None = None) -> PanelConfig:
    """Load panel settings from YAML.

    ``CONFIG_PATH`` overrides the default location and ``KADMIN_BACKEND_URL``
    overrides the backend URL from the file. A missing file yields defaults.
    """

    resolved = Path(path or env_or_default("CONFIG_PATH", DEFAULT_CONFIG_PATH)).expanduser().resolve()
    raw: Dict[str, Any] = {}
    if resolved.exists():
        with resolved.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    else:
        logging.getLogger(__name__).warning("Config file %s not found, using defaults", resolved)

    backend = raw.get("backend", {})
    session = raw.get("session", {})
    dashboard = raw.get("dashboard", {})

    return PanelConfig(
        backend=BackendConfig(
            base_url=os.getenv("KADMIN_BACKEND_URL") or backend.get("base_url", "http://localhost:8080"),
            context_path=backend.get("context_path", ""),
            timeout_seconds=float(backend.get("timeout_seconds", 10.0)),
        ),
        session=SessionDefaults(
            refresh_interval_ms=int(session.get("refresh_interval_ms", 0)),
            default_topic=session.get("default_topic"),
            default_deserializer_id=session.get("default_deserializer_id"),
            source_url=session.get("source_url"),
            schema_url=session.get("schema_url"),
            queue_size=session.get("queue_size"),
        ),
        dashboard=DashboardConfig(
            host=dashboard.get("host", "127.0.0.1"),
            port=int(dashboard.get("port", 8000)),
            enable=dashboard.get("enable", True),
            public_origin=dashboard.get("public_origin"),
        ),
        log_level=raw.get("log_level", "INFO"),
    )


def env_or_default(key: str, default: str) -> str:
    return os.getenv(key, default)


__all__ = [
    "load_config",
    "PanelConfig",
    "BackendConfig",
    "SessionDefaults",
    "DashboardConfig",
]
