"""Errors raised by the notification stream layer."""

from config.constants import ERROR_CODE_PERMISSION_DENIED


class StreamError(Exception):
    """Base class for notification stream failures."""


class ConfigurationError(StreamError):
    """Raised when the stream server address cannot be resolved."""


class HandshakeRejected(StreamError):
    """Raised when the backend refuses to open the authenticated stream."""

    def __init__(self, message: str, status: int | None = None, code: str | None = None) -> None:
        self.status = status
        self.code = code
        super().__init__(message)

    @property
    def permission_denied(self) -> bool:
        if self.code is not None:
            return self.code == ERROR_CODE_PERMISSION_DENIED
        if self.status == 403:
            return True
        # Older backends only report the reason in the message text
        return "permission" in str(self).lower()


class UnknownEventError(StreamError):
    """Raised when a stream event name has no typed counterpart."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown stream event: {name}")
