# Overview: Locking and retry for stock ledger writes (movement row + product counter).

"""
Stock write concurrency.

A stock movement touches two rows that must agree: the new StockMovement
and Product.stock_quantity. Two guards keep concurrent movements from
losing updates:
- the product row is read with SELECT ... FOR UPDATE (a no-op on SQLite)
- Product.version_id makes a stale counter write fail with StaleDataError

A losing writer rolls back and replays the whole movement against the
fresh counter, so "out" is re-checked against the stock actually on hand.
"""

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

RETRY_ATTEMPTS = 3
RETRY_BACKOFF_SECONDS = 0.1


def lock_for_update(query):
    """Lock the selected product rows until the movement commits."""
    return query.with_for_update()


def run_with_retry(op, *, attempts: int = RETRY_ATTEMPTS, backoff_base: float = RETRY_BACKOFF_SECONDS):
    """
    Run op() until it commits or attempts run out.

    op must re-read everything it writes; it is replayed from scratch after
    a rollback. Only lock timeouts/deadlocks (OperationalError) and
    version conflicts (StaleDataError) are retried.
    """
    for attempt in range(1, attempts + 1):
        try:
            return op()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt == attempts:
                raise
            current_app.logger.warning("Stock write conflict, retrying (%s/%s)", attempt, attempts - 1)
            time.sleep(backoff_base * (2 ** (attempt - 1)))
