"""Runtime client configuration fetched from the back-office API."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
import aiohttp
import structlog
from config.constants import CONFIG_ENDPOINT, TOAST_DURATION
from config.settings import settings
from realtime.errors import ConfigurationError
from utils.retry import async_retry

log = structlog.get_logger(__name__)


@dataclass
class ClientConfig:
    """Public configuration served at ``/api/config``."""
    api_url: str
    socket_url: str
    environment: str = "development"
    real_time_notifications: bool = True
    toast_duration: float = TOAST_DURATION  # seconds
    version: str = "1.0.0"
    fallback: bool = False
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any], base_url: str = "") -> "ClientConfig":
        features = payload.get("features") or {}
        client_settings = payload.get("settings") or {}
        api_url = payload.get("apiUrl") or base_url
        socket_url = payload.get("socketUrl") or api_url
        if not socket_url:
            raise ConfigurationError("Config payload has no socketUrl and no base URL is configured")
        toast_ms = client_settings.get("toastDuration")
        return cls(
            api_url=api_url,
            socket_url=socket_url,
            environment=payload.get("environment", "development"),
            real_time_notifications=bool(features.get("realTimeNotifications", True)),
            toast_duration=toast_ms / 1000 if toast_ms else TOAST_DURATION,
            version=str(payload.get("version", "1.0.0")),
            fallback=bool(payload.get("_fallback", False)),
            raw=payload,
        )


class ConfigService:
    """Fetches and caches the runtime config; falls back to the configured base URL."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self.base_url = (settings.api_base_url if base_url is None else base_url).rstrip("/")
        self.timeout = settings.config_timeout if timeout is None else timeout
        self._config: ClientConfig | None = None
        self._lock = asyncio.Lock()
        self._session: aiohttp.ClientSession | None = None
        self._listeners: list[Callable[[ClientConfig], None]] = []

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    async def get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_config(self) -> ClientConfig:
        """Return the cached config, fetching it once if needed."""
        if self._config is not None:
            return self._config
        # Concurrent callers wait for the in-flight fetch instead of issuing their own
        async with self._lock:
            if self._config is None:
                self._config = await self._fetch()
                self._notify(self._config)
        return self._config

    async def refresh(self) -> ClientConfig:
        self._config = None
        return await self.get_config()

    def clear(self) -> None:
        self._config = None

    def get(self, path: str, default: Any = None) -> Any:
        """Read a dotted path (``"settings.toastDuration"``) from the raw payload."""
        if self._config is None:
            return default
        value: Any = self._config.raw
        for key in path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def subscribe(self, listener: Callable[[ClientConfig], None]) -> Callable[[], None]:
        """Register a listener for config loads; called immediately if already loaded."""
        self._listeners.append(listener)
        if self._config is not None:
            self._call(listener, self._config)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _fetch(self) -> ClientConfig:
        if not self.base_url:
            raise ConfigurationError("No API base URL configured")
        try:
            payload = await self._request(f"{self.base_url}{CONFIG_ENDPOINT}")
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            log.warning("config_fetch_failed", url=self.base_url, error=str(e))
            return self._fallback()

        config = ClientConfig.from_payload(payload, base_url=self.base_url)
        log.info(
            "config_loaded",
            api_url=config.api_url,
            socket_url=config.socket_url,
            environment=config.environment,
        )
        return config

    @async_retry(max_retries=2, base_delay=0.5, max_delay=2.0, exceptions=(aiohttp.ClientError, TimeoutError))
    async def _request(self, url: str) -> dict[str, Any]:
        session = await self.get_session()
        async with session.get(url) as resp:
            resp.raise_for_status()
            data = await resp.json()
        if not isinstance(data, dict):
            raise ValueError("Config endpoint did not return an object")
        return data

    def _fallback(self) -> ClientConfig:
        log.warning("config_using_fallback", socket_url=self.base_url)
        return ClientConfig.from_payload(
            {"apiUrl": self.base_url, "socketUrl": self.base_url, "_fallback": True},
            base_url=self.base_url,
        )

    def _notify(self, config: ClientConfig) -> None:
        for listener in list(self._listeners):
            self._call(listener, config)

    @staticmethod
    def _call(listener: Callable[[ClientConfig], None], config: ClientConfig) -> None:
        try:
            listener(config)
        except Exception as e:
            log.error("config_listener_error", error=str(e))
