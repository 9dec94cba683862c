# Overview: Compare-and-set helpers for rows that several admins may touch at once.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db


def compare_and_set(model, row_id, *, expected: dict, values: dict) -> bool:
    """
    UPDATE model SET values WHERE id = row_id AND every expected column matches.

    Returns True when exactly one row changed. False means the row is gone
    or another writer got there first; the caller decides which. Runs inside
    the caller's transaction and never commits or retries.
    """
    stmt = update(model).where(model.id == row_id)
    for column, value in expected.items():
        stmt = stmt.where(getattr(model, column) == value)
    stmt = stmt.values(**values).execution_options(synchronize_session=False)

    result = db.session.execute(stmt)
    return result.rowcount == 1
