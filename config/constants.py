"""Constants used across the application."""

from enum import Enum


# Notification severities, highest first
class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    WARNING = "warning"
    INFO = "info"


# Sort priority; anything not listed ranks after WARNING
SEVERITY_ORDER = {
    Severity.CRITICAL.value: 0,
    Severity.HIGH.value: 1,
    Severity.WARNING.value: 2,
}
DEFAULT_SEVERITY_RANK = 3

# Severities tracked in the running counts
COUNTED_SEVERITIES = (Severity.CRITICAL, Severity.HIGH, Severity.WARNING)


# Notification types
class NotificationType(str, Enum):
    EXPIRED_ON_SHELF = "expired_on_shelf"
    EXPIRED_IN_WAREHOUSE = "expired_in_warehouse"
    EXPIRING_SOON = "expiring_soon"
    LOW_STOCK = "low_stock"
    CREDIT_HIGH_UTILIZATION = "credit_high_utilization"
    CREDIT_NEAR_LIMIT = "credit_near_limit"
    CREDIT_EXCEEDED = "credit_exceeded"


CREDIT_TYPE_PREFIX = "credit_"


# Stream connection state
class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


# Stream events consumed from the backend
class StreamEvent(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    NOTIFICATION = "notification"
    NOTIFICATION_INITIAL = "notification:initial"
    NOTIFICATION_REFRESH = "notification:refresh"
    NOTIFICATION_ERROR = "notification:error"


# Backend-specific alert events, re-emitted locally as StreamEvent.NOTIFICATION
NOTIFICATION_ALIASES = (
    "notification:inventory:expired",
    "notification:inventory:expiring",
    "notification:stock:low",
    "notification:supplier:credit",
)

# Commands sent to the backend
CMD_FETCH = "notification:fetch"
CMD_MARK_READ = "notification:mark_read"

# Permissions
PERMISSION_VIEW_NOTIFICATIONS = "view_notifications"
SUPER_ADMIN_PERMISSION = "all"

# Structured handshake error code for a missing permission
ERROR_CODE_PERMISSION_DENIED = "permission_denied"

# Toast timings (seconds)
TOAST_DURATION = 10.0
TOAST_DEDUP_GRACE = 5.0

# Stream reconnection bounds
RECONNECTION_DELAY = 1.0
RECONNECTION_DELAY_MAX = 5.0
RECONNECTION_ATTEMPTS = 5

# Runtime config endpoint
CONFIG_ENDPOINT = "/api/config"
CONFIG_TIMEOUT = 5.0
