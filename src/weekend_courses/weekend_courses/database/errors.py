from __future__ import annotations

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageError

_FRIENDLY = {
    errorcode.ER_DUP_ENTRY: "A record with this information already exists",
    errorcode.ER_ROW_IS_REFERENCED_2: "The record is still referenced by other records",
    errorcode.ER_NO_REFERENCED_ROW_2: "Invalid reference to related record",
    errorcode.ER_LOCK_WAIT_TIMEOUT: "The database is busy, please try again",
    errorcode.ER_LOCK_DEADLOCK: "The database is busy, please try again",
}


def translate_storage_error(exc: mysql.connector.Error) -> StorageError:
    """Map a driver error onto a stable message; raw codes never reach callers."""
    errno = getattr(exc, "errno", None)
    if errno in _FRIENDLY:
        return StorageError(_FRIENDLY[errno], errno=errno)
    if isinstance(exc, mysql.connector.InterfaceError):
        return StorageError("The database is unavailable", errno=errno)
    return StorageError("An unexpected database error occurred", errno=errno)
