"""Infrastructure utilities for configuration and logging."""

from .config import PanelConfig, load_config
from .logging import JsonFormatter, configure_logging

__all__ = [
    "configure_logging",
    "JsonFormatter",
    "load_config",
    "PanelConfig",
]
