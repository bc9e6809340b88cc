"""Database helper functions."""

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True if the integrity error was caused by a unique constraint.

    PostgreSQL drivers expose the SQLSTATE; SQLite only reports it in the message.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message
