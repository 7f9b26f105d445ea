from __future__ import annotations

from sqlalchemy.exc import DBAPIError

SQLITE_UNIQUE_ERRORS = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
SQLSTATE_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: BaseException) -> bool:
    """Tell a UNIQUE constraint failure apart from any other store error.

    Uses the driver's own error code rather than the message text.
    """
    orig = exc.orig if isinstance(exc, DBAPIError) else exc
    if orig is None:
        return False
    if getattr(orig, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORS:
        return True
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate == SQLSTATE_UNIQUE_VIOLATION
