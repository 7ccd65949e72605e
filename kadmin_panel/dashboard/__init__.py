"""Panel collaborator: rendering and the HTTP surface for the consumer session."""

from .app import PanelState, create_panel_app
from .rendering import RenderedMessage, RenderedPage, render_page

__all__ = ["PanelState", "create_panel_app", "RenderedMessage", "RenderedPage", "render_page"]
