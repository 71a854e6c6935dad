# backend/orderdesk/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/orderdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///orderdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seconds between change checks for the live order listing
    TRACKING_POLL_INTERVAL = float(os.environ.get("TRACKING_POLL_INTERVAL", "2.0"))

    # "overlap": any shared variety matches. "superset": stock must carry every requested variety.
    STOCK_MATCH_POLICY = os.environ.get("STOCK_MATCH_POLICY", "overlap")

    # When False any target status may be set (Completed -> Preparing Order included)
    ENFORCE_FORWARD_STATUS = _env_bool("ENFORCE_FORWARD_STATUS", False)

    # Recorded as updated_by on stock history rows written by status transitions
    STOCK_HISTORY_ACTOR = os.environ.get("STOCK_HISTORY_ACTOR", "System")

    # Browser origins allowed to call the API (the staff dashboard front end)
    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")
        if origin.strip()
    ]
