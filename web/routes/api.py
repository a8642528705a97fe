"""JSON API over the session's notification provider."""

from quart import Blueprint, current_app, jsonify, request
from notifications.filters import group_by_severity, sort_by_severity
from notifications.formatter import format_notification, format_toast

api_bp = Blueprint("api", __name__)


def provider_required(f):
    from functools import wraps

    @wraps(f)
    async def decorated(*args, **kwargs):
        provider = current_app.notification_provider  # type: ignore[attr-defined]
        if provider is None:
            return jsonify({"error": "notifications unavailable"}), 503
        return await f(provider, *args, **kwargs)

    return decorated


@api_bp.route("/notifications")
@provider_required
async def get_notifications(provider):
    """Current notifications, toasts, counts and connection badge."""
    notifications = provider.notifications
    if request.args.get("sorted") in ("1", "true"):
        notifications = sort_by_severity(notifications)
    body = {
        "notifications": [format_notification(n) for n in notifications],
        "toasts": [format_toast(t) for t in provider.toasts.toasts],
        "counts": provider.store.counts.to_dict(),
        "isConnected": provider.is_connected,
        "status": "Real-time" if provider.is_connected else "Offline",
    }
    if request.args.get("grouped") in ("1", "true"):
        body["groups"] = {
            severity: [n.id for n in items]
            for severity, items in group_by_severity(notifications).items()
        }
    return jsonify(body)


@api_bp.route("/notifications/fetch", methods=["POST"])
@provider_required
async def fetch_notifications(provider):
    provider.fetch_notifications()
    return jsonify({"requested": True}), 202


@api_bp.route("/notifications/<notification_id>/read", methods=["POST"])
@provider_required
async def mark_read(provider, notification_id: str):
    provider.mark_read(notification_id)
    return jsonify({"id": notification_id}), 202


@api_bp.route("/notifications/clear", methods=["POST"])
@provider_required
async def clear_notifications(provider):
    provider.clear_notifications()
    return "", 204


@api_bp.route("/toasts/<toast_id>", methods=["DELETE"])
@provider_required
async def dismiss_toast(provider, toast_id: str):
    provider.remove_toast(toast_id)
    return "", 204
