"""Shared test fixtures for the notification console test suite."""

import asyncio
import pytest
import orjson
from unittest.mock import AsyncMock, MagicMock
from auth.session import Session
from realtime.config_service import ClientConfig
from realtime.connection import ConnectionManager
from notifications.types import Notification


# ── Websocket fakes ──


_CLOSE = object()


class FakeWebSocket:
    """Mimics a websockets client connection driven by the test."""

    def __init__(self):
        self.sent: list[str] = []
        self.closed = False
        self._incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, message):
        self.sent.append(message)

    async def close(self):
        self.closed = True
        self._incoming.put_nowait(_CLOSE)

    def push(self, event, data=None):
        """Queue a frame as the backend would send it."""
        self._incoming.put_nowait(orjson.dumps({"event": event, "data": data}))

    def push_raw(self, raw):
        self._incoming.put_nowait(raw)

    def drop(self):
        """Simulate the transport going away."""
        self._incoming.put_nowait(_CLOSE)

    def sent_frames(self) -> list[dict]:
        return [orjson.loads(m) for m in self.sent]

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        return item


class FakeConnector:
    """Stands in for ``websockets.connect``; records calls, can fail on demand."""

    def __init__(self):
        self.calls: list[tuple[str, dict]] = []
        self.sockets: list[FakeWebSocket] = []
        self.failures: list[Exception] = []
        self.gate: asyncio.Event | None = None  # when set, handshakes wait on it

    async def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            raise self.failures.pop(0)
        ws = FakeWebSocket()
        self.sockets.append(ws)
        return ws

    @property
    def last(self) -> FakeWebSocket:
        return self.sockets[-1]


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def client_config():
    return ClientConfig(api_url="http://backoffice.test", socket_url="http://backoffice.test")


@pytest.fixture
def config_service(client_config):
    """Mock ConfigService that resolves immediately."""
    svc = MagicMock()
    svc.get_config = AsyncMock(return_value=client_config)
    return svc


@pytest.fixture
def connection(config_service, connector):
    return ConnectionManager(
        config_service,
        connector=connector,
        stream_path="/ws/notifications",
        reconnection_delay=0.01,
        reconnection_delay_max=0.02,
        reconnection_attempts=2,
    )


# ── Sessions ──


@pytest.fixture
def session():
    return Session(token="jwt-token", username="manager", permissions=frozenset({"view_notifications"}))


@pytest.fixture
def cashier_session():
    """A logged-in user without the notifications permission."""
    return Session(token="jwt-token", username="cashier", permissions=frozenset({"manage_POS"}))


# ── Notification builders ──


def make_notification(id, severity="warning", type="low_stock", **data):
    return Notification(
        id=str(id),
        type=type,
        severity=severity,
        title=f"Alert {id}",
        message=f"Message {id}",
        data=data,
    )


@pytest.fixture
def notification_factory():
    return make_notification


# ── Loop helpers ──


@pytest.fixture
def wait_for():
    """Poll a predicate while letting the event loop run."""

    async def _wait(predicate, timeout=1.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(0.005)

    return _wait
