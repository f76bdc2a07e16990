# Overview: Service-layer helpers for contended rows; conditional updates and retry.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def conditional_decrement(model, row_id: int, column, *, floor: int = 0) -> int:
    """
    Atomically decrement `column` by one on a single row, only while it is
    above `floor`.

    Issues one UPDATE ... WHERE id = :id AND column > :floor statement and
    returns the affected row count (0 or 1). A zero result means another
    writer got there first or the row is already at the floor. Models with a
    version_id_col get their version bumped in the same statement.
    """
    values = {column: column - 1}
    version_col = getattr(model, "version_id", None)
    if version_col is not None:
        values[version_col] = version_col + 1
    return (
        db.session.query(model)
        .filter(model.id == row_id, column > floor)
        .update(values, synchronize_session=False)
    )


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, "database is locked") and
    StaleDataError (optimistic locking conflicts). Business errors are never
    retried; they propagate on the first attempt.
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
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
