"""FastAPI panel exposing the consumer session to a browser or script."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kadmin_panel.data.clients import BackendError, CatalogBackend
from kadmin_panel.data.models import MessagePage
from kadmin_panel.dashboard.rendering import RenderedPage, format_time, render_page
from kadmin_panel.session.config import SessionConfig, ValidationError, ValidationErrorKind
from kadmin_panel.session.controller import SessionController
from kadmin_panel.session.urls import build_permalink


class PanelState:
    """Session listener holding what the panel currently shows."""

    def __init__(self, public_origin: Optional[str] = None) -> None:
        self.public_origin = public_origin
        self.form_enabled = True
        self.config: Optional[SessionConfig] = None
        self.session_id: Optional[str] = None
        self.page: Optional[RenderedPage] = None
        self.updated_at: Optional[str] = None
        self.permalink: Optional[str] = None
        self.last_error: Optional[Dict[str, Any]] = None
        self.validation_error: Optional[str] = None

    def on_config_built(self, config: SessionConfig) -> None:
        self.config = config
        self.form_enabled = False
        self.page = None
        self.last_error = None
        self.validation_error = None
        if self.public_origin:
            self.permalink = build_permalink(config, self.public_origin)

    def on_page_received(self, session_id: Optional[str], page: MessagePage, since: int) -> None:
        self.session_id = session_id
        topic = self.config.topic if self.config else ""
        self.page = render_page(topic, page)
        self.updated_at = format_time(since)
        self.last_error = None

    def on_disposed(self) -> None:
        self.page = None
        self.session_id = None
        self.form_enabled = True
        self.permalink = None

    def on_validation_error(self, kind: ValidationErrorKind) -> None:
        self.validation_error = kind.value

    def on_backend_error(self, error: BackendError) -> None:
        self.last_error = error.to_dict()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "form_enabled": self.form_enabled,
            "session_id": self.session_id,
            "title": self.page.title if self.page else None,
            "total_elements": self.page.total_elements if self.page else None,
            "messages": [asdict(message) for message in self.page.messages] if self.page else [],
            "updated_at": self.updated_at,
            "permalink": self.permalink,
            "error": self.last_error,
            "validation_error": self.validation_error,
        }


def create_panel_app(controller: SessionController, catalog: CatalogBackend, state: PanelState) -> FastAPI:
    app = FastAPI(title="Kadmin Consumer Panel", version="0.1.0")

    def session_view(**extra: Any) -> Dict[str, Any]:
        return {**controller.snapshot(), **state.snapshot(), **extra}

    @app.exception_handler(ValidationError)
    async def validation_failed(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": exc.kind.value, "detail": exc.detail})

    @app.exception_handler(BackendError)
    async def backend_failed(request: Request, exc: BackendError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": exc.to_dict()})

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "session": controller.state.value}

    @app.get("/topics")
    async def topics(source_url: Optional[str] = None) -> List[str]:
        return await asyncio.to_thread(catalog.list_topics, source_url or None)

    @app.get("/deserializers")
    async def deserializers() -> List[Dict[str, Any]]:
        return [asdict(item) for item in await asyncio.to_thread(catalog.list_deserializers)]

    @app.get("/consumers")
    async def consumers() -> List[Dict[str, Any]]:
        return [asdict(item) for item in await asyncio.to_thread(catalog.list_consumers)]

    @app.get("/session")
    async def session() -> Dict[str, Any]:
        return session_view()

    @app.post("/session/start")
    async def start(body: Dict[str, Any]) -> JSONResponse:
        started = await controller.start(body)
        if not started:
            return JSONResponse(status_code=409, content=session_view(ok=False))
        return JSONResponse(session_view(ok=True))

    @app.post("/session/refresh")
    async def refresh() -> Dict[str, Any]:
        page = await controller.refresh(manual=True)
        return session_view(ok=page is not None)

    @app.post("/session/truncate")
    async def truncate() -> Dict[str, Any]:
        return session_view(ok=await controller.truncate())

    @app.post("/session/dispose")
    async def dispose() -> Dict[str, Any]:
        return session_view(ok=await controller.dispose())

    @app.put("/session/refresh-interval")
    async def refresh_interval(body: Dict[str, int]) -> Dict[str, Any]:
        await controller.set_refresh_interval(int(body.get("refresh_interval_ms", 0)))
        return session_view(ok=True)

    return app


__all__ = ["create_panel_app", "PanelState"]
