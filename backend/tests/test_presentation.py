# Overview: Pytest coverage for staff table display helpers.

from datetime import datetime

import pytest

from orderdesk import presentation


@pytest.mark.parametrize("status,expected", [
    ("Order Placed", "bg-blue-100 text-blue-800"),
    ("order confirmed", "bg-purple-100 text-purple-800"),
    ("Preparing Order", "bg-yellow-100 text-yellow-800"),
    ("Ready for Pickup", "bg-green-100 text-green-800"),
    ("Completed", "bg-green-100 text-green-800"),
    ("Cancelled", "bg-red-100 text-red-800"),
    ("Shipped", "bg-gray-100 text-gray-800"),
    (None, "bg-gray-100 text-gray-800"),
])
def test_status_badge(status, expected):
    assert presentation.status_badge(status) == expected


def test_payment_badge_and_label():
    assert presentation.payment_badge("GCash", "approved") == "bg-green-100 text-green-800"
    assert presentation.payment_badge("GCash", "pending") == "bg-yellow-100 text-yellow-800"
    assert presentation.payment_badge("Cash") == "bg-blue-100 text-blue-800"
    assert presentation.payment_label("GCash", "approved") == "GCash (Approved)"
    assert presentation.payment_label("Cash", None) == "Cash"


def test_short_order_id():
    assert presentation.short_order_id("abcdef123456") == "#abcdef"


def test_format_display_date():
    assert presentation.format_display_date(datetime(2025, 1, 5, 9, 30)) == "January 5, 2025"
    assert presentation.format_display_date("2025-01-05T23:30:00Z") == "January 5, 2025"
    assert presentation.format_display_date(None) is None
