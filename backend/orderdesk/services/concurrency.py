# Overview: Service-layer concurrency helpers shared by every multi-row write.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    populate_existing() makes the locked read overwrite any copy already in
    the identity map, so callers always see the committed row.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; use begin_immediate() there.
    """
    return query.with_for_update().populate_existing()


def begin_immediate() -> None:
    """
    Take the SQLite write lock at the start of a transaction.

    SQLite has no row locks, so read-then-write sequences (stock checks)
    must hold the database write lock from their first read. No-op on
    other dialects, which rely on lock_for_update instead.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, busy database) and StaleDataError
    (version_id conflicts). Domain errors raised by func propagate at once.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Concurrent write conflict (attempt %d/%d): %s", attempt + 1, attempts, exc
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
