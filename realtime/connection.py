"""Authenticated notification stream with bounded automatic reconnection."""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlsplit, urlunsplit
import orjson
import structlog
import websockets
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidStatus
from config.constants import (
    CMD_FETCH,
    CMD_MARK_READ,
    NOTIFICATION_ALIASES,
    ConnectionState,
    StreamEvent,
)
from config.settings import settings
from realtime.config_service import ConfigService
from realtime.errors import ConfigurationError, HandshakeRejected, StreamError
from utils.retry import retry_async, sanitize_error

log = structlog.get_logger(__name__)

Handler = Callable[[Any], None]
Connector = Callable[..., Awaitable[Any]]

# Lifecycle names are produced locally and never accepted from the wire
_LOCAL_EVENTS = (StreamEvent.CONNECT.value, StreamEvent.DISCONNECT.value)


def build_stream_url(socket_url: str, stream_path: str) -> str:
    """Map the configured server address onto the websocket endpoint."""
    parts = urlsplit(socket_url)
    scheme = {"http": "ws", "https": "wss"}.get(parts.scheme, parts.scheme)
    if scheme not in ("ws", "wss") or not parts.netloc:
        raise ConfigurationError(f"Unusable stream server address: {socket_url!r}")
    path = parts.path.rstrip("/") + "/" + stream_path.lstrip("/")
    return urlunsplit((scheme, parts.netloc, path, "", ""))


def _rejection_from_status(error: InvalidStatus) -> HandshakeRejected:
    status = error.response.status_code
    message = f"Stream handshake rejected with HTTP {status}"
    code = None
    body = error.response.body or b""
    try:
        detail = orjson.loads(body) if body else None
    except orjson.JSONDecodeError:
        detail = None
    if isinstance(detail, dict):
        code = detail.get("code")
        message = detail.get("message") or message
    elif body:
        message = body.decode("utf-8", errors="replace")
    return HandshakeRejected(message, status=status, code=code)


class ConnectionManager:
    """One live event stream per session.

    Local subscribers register with :meth:`on` and receive payloads for
    backend events plus ``connect``/``disconnect`` lifecycle events. After a
    transport drop the manager retries on a capped exponential schedule; once
    attempts run out it stays disconnected until :meth:`connect` is called
    again.
    """

    def __init__(
        self,
        config_service: ConfigService,
        *,
        connector: Connector | None = None,
        stream_path: str | None = None,
        reconnection_delay: float | None = None,
        reconnection_delay_max: float | None = None,
        reconnection_attempts: int | None = None,
    ) -> None:
        self._config_service = config_service
        self._connector = connector or websockets.connect
        self._stream_path = stream_path or settings.stream_path
        self._reconnection_delay = (
            settings.reconnection_delay if reconnection_delay is None else reconnection_delay
        )
        self._reconnection_delay_max = (
            settings.reconnection_delay_max if reconnection_delay_max is None else reconnection_delay_max
        )
        self._reconnection_attempts = (
            settings.reconnection_attempts if reconnection_attempts is None else reconnection_attempts
        )

        self._state = ConnectionState.DISCONNECTED
        self._ws: Any = None
        self._url: str | None = None
        self._token: str | None = None
        self._reader: asyncio.Task | None = None
        self._closing = False
        # Bumped by disconnect(); in-flight connects from an older generation abort
        self._generation = 0
        self._listeners: dict[str, list[Handler]] = {}
        self._pending_sends: set[asyncio.Task] = set()

    @property
    def config_service(self) -> ConfigService:
        return self._config_service

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._ws is not None

    # ── Lifecycle ──

    async def connect(self, token: str) -> None:
        """Open the stream. No-op if already connected or connecting.

        Raises ConfigurationError if no server address can be resolved and
        HandshakeRejected or StreamError if the stream cannot be opened.
        """
        if self._state != ConnectionState.DISCONNECTED:
            log.debug("stream_already_active", state=self._state.value)
            return

        self._state = ConnectionState.CONNECTING
        self._closing = False
        generation = self._generation
        try:
            config = await self._config_service.get_config()
            if generation != self._generation:
                log.info("stream_connect_aborted", stage="config")
                return
            self._url = build_stream_url(config.socket_url, self._stream_path)
            self._token = token
            log.info("stream_connecting", url=self._url)
            if not await self._open():
                return
        except BaseException:
            # Cancellation included; a superseded attempt leaves the newer state alone
            if generation == self._generation:
                self._state = ConnectionState.DISCONNECTED
                self._ws = None
            raise

        self._reader = asyncio.create_task(self._run())

    async def disconnect(self) -> None:
        """Close the stream and drop every local subscriber."""
        self._closing = True
        self._generation += 1
        reader, self._reader = self._reader, None
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass

        ws, self._ws = self._ws, None
        was_connected = self._state == ConnectionState.CONNECTED
        self._state = ConnectionState.DISCONNECTED
        if ws is not None:
            try:
                await ws.close()
            except Exception as e:
                log.warning("stream_close_error", error=str(e))

        if was_connected:
            self.emit(StreamEvent.DISCONNECT.value, "client disconnect")
        self._listeners.clear()
        log.info("stream_disconnected")

    # ── Local subscriptions ──

    def on(self, event: str, handler: Handler) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Handler) -> None:
        """Remove ``handler``; it must be the same object passed to :meth:`on`."""
        handlers = self._listeners.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, data: Any = None) -> None:
        """Deliver an event to local subscribers in registration order."""
        for handler in list(self._listeners.get(event, ())):
            try:
                handler(data)
            except Exception as e:
                log.error("stream_listener_error", stream_event=event, error=str(e))

    # ── Commands to the backend ──

    def send(self, event: str, payload: Any = None) -> None:
        """Fire-and-forget emission. Dropped with a warning when not connected."""
        if not self.is_connected():
            log.warning("stream_send_skipped", stream_event=event, state=self._state.value)
            return

        frame = orjson.dumps({"event": event, "data": payload}).decode()
        task = asyncio.create_task(self._ws.send(frame))
        self._pending_sends.add(task)
        task.add_done_callback(functools.partial(self._send_done, event))

    def fetch_notifications(self) -> None:
        """Ask the backend for a bulk reload; it answers with ``notification:initial``."""
        self.send(CMD_FETCH)

    def mark_notification_read(self, notification_id: str) -> None:
        self.send(CMD_MARK_READ, notification_id)

    # ── Internals ──

    async def _open(self) -> bool:
        """Open the transport. Returns False if disconnect() ran while it was opening."""
        generation = self._generation
        try:
            ws = await self._connector(
                self._url,
                additional_headers={"Authorization": f"Bearer {self._token}"},
            )
        except InvalidStatus as e:
            raise _rejection_from_status(e) from e
        except InvalidHandshake as e:
            raise HandshakeRejected(str(e)) from e
        except (OSError, TimeoutError) as e:
            raise StreamError(f"Cannot reach notification stream: {sanitize_error(str(e))}") from e

        if generation != self._generation:
            log.info("stream_connect_aborted", stage="handshake")
            await ws.close()
            return False

        self._ws = ws
        self._state = ConnectionState.CONNECTED
        log.info("stream_connected", url=self._url)
        self.emit(StreamEvent.CONNECT.value)
        return True

    async def _run(self) -> None:
        while True:
            await self._read(self._ws)
            if self._closing:
                return

            self._ws = None
            self._state = ConnectionState.DISCONNECTED
            self.emit(StreamEvent.DISCONNECT.value, "transport closed")
            if not await self._reconnect():
                return

    async def _read(self, ws: Any) -> None:
        """Dispatch frames until the transport closes."""
        try:
            async for message in ws:
                self._handle_frame(message)
        except ConnectionClosed as e:
            log.warning("stream_dropped", code=e.rcvd.code if e.rcvd else None)
        except OSError as e:
            log.warning("stream_dropped", error=str(e))

    async def _reconnect(self) -> bool:
        if self._reconnection_attempts <= 0:
            log.info("stream_reconnect_disabled")
            return False

        self._state = ConnectionState.CONNECTING
        await asyncio.sleep(self._reconnection_delay)
        try:
            opened = await retry_async(
                self._open,
                max_retries=self._reconnection_attempts - 1,
                base_delay=self._reconnection_delay,
                max_delay=self._reconnection_delay_max,
                exceptions=(StreamError,),
                label="stream_reconnect",
            )
        except StreamError as e:
            self._state = ConnectionState.DISCONNECTED
            log.error(
                "stream_reconnect_exhausted",
                attempts=self._reconnection_attempts,
                error=sanitize_error(str(e)),
            )
            return False
        return opened

    def _handle_frame(self, message: str | bytes) -> None:
        try:
            frame = orjson.loads(message)
        except orjson.JSONDecodeError as e:
            log.warning("stream_frame_invalid", error=str(e))
            return
        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            log.warning("stream_frame_invalid", error="missing event name")
            return

        name = frame["event"]
        if name in _LOCAL_EVENTS:
            log.warning("stream_frame_ignored", stream_event=name)
            return
        if name in NOTIFICATION_ALIASES:
            name = StreamEvent.NOTIFICATION.value
        self.emit(name, frame.get("data"))

    def _send_done(self, event: str, task: asyncio.Task) -> None:
        self._pending_sends.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log.error("stream_send_failed", stream_event=event, error=str(error))
