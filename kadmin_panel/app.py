"""Entry point wiring the kadmin client, consumer session and panel server."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

import uvicorn

from kadmin_panel.dashboard.app import PanelState, create_panel_app
from kadmin_panel.data.clients import BackendEndpoint
from kadmin_panel.data.kadmin_client import KadminClient
from kadmin_panel.infra.config import PanelConfig, load_config
from kadmin_panel.infra.logging import configure_logging
from kadmin_panel.session.config import ValidationError
from kadmin_panel.session.controller import SessionController


def build_client(cfg: PanelConfig, logger: logging.Logger) -> KadminClient:
    """Instantiate the backend client from configuration."""

    endpoint = BackendEndpoint(
        base_url=cfg.backend.base_url,
        context_path=cfg.backend.context_path,
        timeout_seconds=cfg.backend.timeout_seconds,
    )
    return KadminClient(endpoint=endpoint, logger=logger.getChild("client"))


def build_controller(cfg: PanelConfig, client: KadminClient, state: PanelState, logger: logging.Logger) -> SessionController:
    return SessionController(
        client,
        listener=state,
        form_provider=cfg.session.form,
        timeout_seconds=cfg.backend.timeout_seconds,
        default_refresh_interval_ms=cfg.session.refresh_interval_ms,
        logger=logger.getChild("session"),
    )


async def run_panel(config_path: Optional[str] = None) -> None:
    cfg = load_config(config_path)
    configure_logging(cfg.log_level)
    logger = logging.getLogger("kadmin_panel")

    client = build_client(cfg, logger)
    state = PanelState(public_origin=cfg.dashboard.public_origin)
    controller = build_controller(cfg, client, state, logger)

    stop_event = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            asyncio.get_running_loop().add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows/limited environments
            pass

    if cfg.session.autostart:
        logger.info(
            "Starting default session for %s", cfg.session.default_topic,
            extra={"event": "autostart", "topic": cfg.session.default_topic},
        )
        try:
            await controller.start()
        except ValidationError as exc:
            logger.warning("Default session rejected: %s", exc, extra={"event": "autostart_failed"})

    async def serve_panel() -> None:
        if not cfg.dashboard.enable:
            return
        app = create_panel_app(controller, client, state)
        config = uvicorn.Config(app, host=cfg.dashboard.host, port=cfg.dashboard.port, log_level="info")
        server = uvicorn.Server(config)
        await server.serve()
        stop_event.set()

    server_task = asyncio.create_task(serve_panel())
    await stop_event.wait()
    server_task.cancel()
    await asyncio.gather(server_task, return_exceptions=True)

    if controller.session_id is not None:
        await controller.dispose()
    await controller.shutdown()
    logger.info("Panel stopped", extra={"event": "shutdown"})


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Kadmin consumer panel")
    parser.add_argument("--config", default=None, help="Path to the panel YAML config")
    args = parser.parse_args()

    asyncio.run(run_panel(args.config))


if __name__ == "__main__":
    main()
