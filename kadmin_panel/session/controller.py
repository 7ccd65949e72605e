"""Consumer session lifecycle: configure, poll, truncate and dispose.

The controller owns one session at a time and moves it through
``IDLE -> CONFIGURING -> ACTIVE -> DISPOSING -> IDLE``. Fetches are tagged
with a sequence number so a slow response can never overwrite the result of
a newer request, and the :class:`PollScheduler` guarantees that at most one
automatic refresh is pending.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Set

from kadmin_panel.data.clients import BackendError, ConsumerBackend
from kadmin_panel.data.models import MessagePage
from kadmin_panel.session.config import SessionConfig, ValidationError, ValidationErrorKind, build_config
from kadmin_panel.session.polling import PollScheduler

FormProvider = Callable[[], Mapping[str, Any]]


class SessionState(str, Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    ACTIVE = "active"
    DISPOSING = "disposing"


class SessionListener(Protocol):
    """Callbacks the UI layer binds to rendering and form enable/disable."""

    def on_config_built(self, config: SessionConfig) -> None:
        ...

    def on_page_received(self, session_id: Optional[str], page: MessagePage, since: int) -> None:
        ...

    def on_disposed(self) -> None:
        ...

    def on_validation_error(self, kind: ValidationErrorKind) -> None:
        ...

    def on_backend_error(self, error: BackendError) -> None:
        ...


class NoopSessionListener:
    """Listener that ignores every notification."""

    def on_config_built(self, config: SessionConfig) -> None:
        return None

    def on_page_received(self, session_id: Optional[str], page: MessagePage, since: int) -> None:
        return None

    def on_disposed(self) -> None:
        return None

    def on_validation_error(self, kind: ValidationErrorKind) -> None:
        return None

    def on_backend_error(self, error: BackendError) -> None:
        return None


class SessionController:
    """Drives a single consumer session against a kadmin backend."""

    def __init__(
        self,
        backend: ConsumerBackend,
        listener: Optional[SessionListener] = None,
        form_provider: Optional[FormProvider] = None,
        scheduler: Optional[PollScheduler] = None,
        clock: Callable[[], float] = time.time,
        timeout_seconds: float = 10.0,
        default_refresh_interval_ms: int = 0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.backend = backend
        self.listener = listener or NoopSessionListener()
        self.form_provider = form_provider or dict
        self.scheduler = scheduler or PollScheduler()
        self.clock = clock
        self.timeout_seconds = timeout_seconds
        self.default_refresh_interval_ms = max(0, default_refresh_interval_ms)
        self.logger = logger or logging.getLogger(__name__)

        self._state = SessionState.IDLE
        self._config: Optional[SessionConfig] = None
        self._session_id: Optional[str] = None
        self._request_seq = 0
        # bumped on every successful dispose
        self._generation = 0
        self._timer_tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> Optional[SessionConfig]:
        return self._config

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    # --- Lifecycle ---------------------------------------------------------
    async def start(self, form: Optional[Mapping[str, Any]] = None) -> bool:
        """Validate ``form`` and begin polling.

        Raises :class:`ValidationError` when the form cannot start a session;
        the listener is notified before the error propagates. Returns False
        when a session is already running.
        """

        if self._state is not SessionState.IDLE:
            self.logger.warning(
                "Ignoring start while session is %s", self._state.value,
                extra={"event": "start_ignored", "state": self._state.value},
            )
            return False
        self._configure(form)
        await self.refresh(manual=False)
        return True

    async def refresh(self, manual: bool = False) -> Optional[MessagePage]:
        """Fetch the latest page and, for automatic refreshes, schedule the next one."""

        if self._state is SessionState.DISPOSING:
            self.logger.debug("Ignoring refresh while disposing", extra={"event": "refresh_ignored"})
            return None
        if self._state is SessionState.IDLE:
            try:
                self._configure(None)
            except ValidationError:
                return None

        if self._config is None:
            return None
        self.scheduler.cancel()
        self._config = replace(self._config, since=int(self.clock() * 1000))
        self._request_seq += 1
        seq = self._request_seq
        generation = self._generation
        known_id = self._session_id
        config = self._config

        try:
            result = await self._call_backend(self.backend.read, config)
        except BackendError as exc:
            if self._is_current(seq):
                self._report_backend_error("read", exc)
            else:
                self.logger.warning(
                    "Superseded read failed: %s", exc,
                    extra={"event": "stale_error", "request_seq": seq, "kind": exc.kind.value},
                )
            return None

        if not self._is_current(seq):
            self.logger.debug(
                "Discarding stale response for request %s", seq,
                extra={"event": "stale_response", "request_seq": seq, "latest_seq": self._request_seq},
            )
            if known_id is None and result.consumer_id and generation != self._generation:
                await self._release_orphan(result.consumer_id)
            return None

        if self._session_id is None and result.consumer_id:
            self._session_id = result.consumer_id
            self.logger.info(
                "Consumer session %s opened for %s", result.consumer_id, config.topic,
                extra={"event": "session_assigned", "session_id": result.consumer_id, "topic": config.topic},
            )
        self.listener.on_page_received(self._session_id, result.page, config.since)
        self.scheduler.schedule_if_needed(self._config.refresh_interval_ms, manual, self._on_timer)
        return result.page

    async def truncate(self) -> bool:
        """Clear the backend buffer for the session and re-render it."""

        if self._state is SessionState.IDLE:
            try:
                await self.start()
            except ValidationError:
                return False
        elif self._state is SessionState.ACTIVE and self._session_id is None:
            await self.refresh(manual=True)

        if self._state is not SessionState.ACTIVE or self._session_id is None:
            self.logger.warning(
                "Cannot truncate without an active consumer",
                extra={"event": "truncate_skipped", "state": self._state.value},
            )
            return False

        session_id = self._session_id
        try:
            await self._call_backend(self.backend.truncate, session_id)
        except BackendError as exc:
            self._report_backend_error("truncate", exc)
            return False

        self.logger.info("Truncated consumer %s", session_id, extra={"event": "session_truncated", "session_id": session_id})
        await self.refresh(manual=True)
        return True

    async def dispose(self) -> bool:
        """Shut down the backend consumer and return to ``IDLE``.

        On failure the controller goes back to ``ACTIVE`` so the user can
        retry; polling stays stopped until the next refresh.
        """

        if self._state is not SessionState.ACTIVE:
            self.logger.warning(
                "Ignoring dispose while session is %s", self._state.value,
                extra={"event": "dispose_ignored", "state": self._state.value},
            )
            return False

        self._state = SessionState.DISPOSING
        self.scheduler.cancel()
        self._request_seq += 1
        session_id = self._session_id

        if session_id is not None:
            try:
                await self._call_backend(self.backend.dispose, session_id)
            except BackendError as exc:
                self._state = SessionState.ACTIVE
                self._report_backend_error("dispose", exc)
                return False

        self._session_id = None
        self._generation += 1
        if self._config is not None:
            self._config = replace(self._config, started=False)
        self._state = SessionState.IDLE
        self.listener.on_disposed()
        self.logger.info("Consumer session %s disposed", session_id, extra={"event": "session_disposed", "session_id": session_id})
        return True

    async def set_refresh_interval(self, interval_ms: int) -> None:
        """Apply a new polling cadence right away."""

        interval_ms = max(0, int(interval_ms))
        self.default_refresh_interval_ms = interval_ms
        if self._state is not SessionState.ACTIVE or self._config is None:
            return

        self._config = replace(self._config, refresh_interval_ms=interval_ms)
        self.scheduler.cancel()
        self.logger.info(
            "Refresh interval set to %sms", interval_ms,
            extra={"event": "refresh_interval_changed", "interval_ms": interval_ms},
        )
        if interval_ms > 0:
            await self.refresh(manual=False)

    async def drain(self) -> None:
        """Wait for refreshes spawned by fired timers."""

        while self._timer_tasks:
            await asyncio.gather(*list(self._timer_tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Stop polling without contacting the backend."""

        self.scheduler.cancel()
        self._request_seq += 1
        for task in list(self._timer_tasks):
            task.cancel()
        await asyncio.gather(*list(self._timer_tasks), return_exceptions=True)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "session_id": self._session_id,
            "config": self._config.to_dict() if self._config else None,
            "refresh_pending": self.scheduler.pending,
        }

    # --- Internals ---------------------------------------------------------
    def _configure(self, form: Optional[Mapping[str, Any]]) -> SessionConfig:
        values = dict(form if form is not None else self.form_provider())
        if "refresh_interval_ms" not in values and "refreshIntervalMs" not in values:
            values["refresh_interval_ms"] = self.default_refresh_interval_ms
        self._state = SessionState.CONFIGURING
        try:
            config = build_config(values)
        except ValidationError as exc:
            self._state = SessionState.IDLE
            self.logger.info(
                "Rejected session form: %s", exc,
                extra={"event": "validation_error", "kind": exc.kind.value},
            )
            self.listener.on_validation_error(exc.kind)
            raise

        self._config = config
        self._session_id = None
        self._state = SessionState.ACTIVE
        self.listener.on_config_built(config)
        self.logger.info(
            "Session configured for %s", config.topic,
            extra={
                "event": "session_configured",
                "topic": config.topic,
                "deserializer_id": config.deserializer_id,
                "interval_ms": config.refresh_interval_ms,
            },
        )
        return config

    def _is_current(self, seq: int) -> bool:
        return seq == self._request_seq and self._state is SessionState.ACTIVE

    def _on_timer(self) -> None:
        task = asyncio.ensure_future(self.refresh(manual=False))
        self._timer_tasks.add(task)
        task.add_done_callback(self._timer_tasks.discard)

    async def _call_backend(self, func: Callable[..., Any], *args: Any) -> Any:
        try:
            if inspect.iscoroutinefunction(func):
                return await asyncio.wait_for(func(*args), timeout=self.timeout_seconds)
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise BackendError.network_failure(getattr(func, "__name__", "backend"), "timed out") from exc

    async def _release_orphan(self, consumer_id: str) -> None:
        """Delete a consumer whose first read came back after its session was disposed."""

        self.logger.info(
            "Disposing orphaned consumer %s", consumer_id,
            extra={"event": "orphan_dispose", "session_id": consumer_id},
        )
        try:
            await self._call_backend(self.backend.dispose, consumer_id)
        except BackendError as exc:
            self._report_backend_error("dispose", exc)

    def _report_backend_error(self, operation: str, error: BackendError) -> None:
        self.logger.error(
            "Backend %s failed: %s", operation, error,
            extra={
                "event": "backend_error",
                "operation": operation,
                "kind": error.kind.value,
                "status_code": error.status_code,
                "session_id": self._session_id,
            },
        )
        self.listener.on_backend_error(error)


__all__ = ["SessionController", "SessionState", "SessionListener", "NoopSessionListener"]
