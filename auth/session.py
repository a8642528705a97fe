"""Authenticated session as seen by the notification pipeline."""

from dataclasses import dataclass, field
from config.constants import PERMISSION_VIEW_NOTIFICATIONS, SUPER_ADMIN_PERMISSION


@dataclass(frozen=True)
class Session:
    """A logged-in back-office user: bearer token plus granted permissions."""
    token: str = ""
    username: str = ""
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, token: str, user: dict | None) -> "Session":
        """Build from the auth service's user record (``{"username", "permissions"}``)."""
        user = user or {}
        return cls(
            token=token or "",
            username=user.get("username", ""),
            permissions=frozenset(user.get("permissions") or ()),
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions or SUPER_ADMIN_PERMISSION in self.permissions

    @property
    def can_view_notifications(self) -> bool:
        return self.has_permission(PERMISSION_VIEW_NOTIFICATIONS)
