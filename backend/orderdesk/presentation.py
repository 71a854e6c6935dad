# Overview: Display helpers for the staff order table (badges, labels, dates).

from __future__ import annotations

from datetime import datetime

from orderdesk.time_utils import as_datetime


STATUS_BADGES = {
    "order placed": "bg-blue-100 text-blue-800",
    "order confirmed": "bg-purple-100 text-purple-800",
    "preparing order": "bg-yellow-100 text-yellow-800",
    "ready for pickup": "bg-green-100 text-green-800",
    "completed": "bg-green-100 text-green-800",
    "cancelled": "bg-red-100 text-red-800",
}
DEFAULT_BADGE = "bg-gray-100 text-gray-800"


def status_badge(status: str | None) -> str:
    if not status:
        return DEFAULT_BADGE
    return STATUS_BADGES.get(status.lower(), DEFAULT_BADGE)


def payment_badge(payment_method: str, payment_status: str | None = None) -> str:
    if payment_method == "GCash":
        if payment_status == "approved":
            return "bg-green-100 text-green-800"
        return "bg-yellow-100 text-yellow-800"
    return "bg-blue-100 text-blue-800"


def payment_label(payment_method: str, payment_status: str | None = None) -> str:
    if payment_method == "GCash" and payment_status == "approved":
        return f"{payment_method} (Approved)"
    return payment_method


def short_order_id(order_id: str) -> str:
    return f"#{order_id[:6]}"


def format_display_date(value: datetime | str | None) -> str | None:
    """e.g. "January 5, 2025"."""
    value = as_datetime(value)
    if value is None:
        return None
    return f"{value.strftime('%B')} {value.day}, {value.year}"
