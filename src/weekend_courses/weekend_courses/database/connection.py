from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol

import mysql.connector

from ..core.constants import DEFAULT_LOCK_WAIT_TIMEOUT_SECONDS
from .errors import translate_storage_error

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    lock_wait_timeout: int = DEFAULT_LOCK_WAIT_TIMEOUT_SECONDS

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
            lock_wait_timeout=int(db_config.get("lock_wait_timeout", DEFAULT_LOCK_WAIT_TIMEOUT_SECONDS)),
        )


class TransactionManager(Protocol):
    def transaction(self):
        """Context manager grouping repository calls into one unit of work."""

        raise NotImplementedError


class DatabaseConnection:
    """DB connection factory handed to every repository.

    Outside a transaction each repository call gets a short-lived connection.
    Inside `transaction()` every call on the same thread shares one
    connection, committed or rolled back as a whole.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )

    def current(self):
        """Connection of the transaction open on this thread, if any."""
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self.current() is not None:
            # Nested call joins the outer unit of work.
            yield
            return

        try:
            conn = self.connect()
        except mysql.connector.Error as exc:
            raise translate_storage_error(exc) from exc

        try:
            cur = conn.cursor()
            cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (int(self._config.lock_wait_timeout),))
            cur.close()
            conn.start_transaction(isolation_level="READ COMMITTED")
        except mysql.connector.Error as exc:
            conn.close()
            raise translate_storage_error(exc) from exc

        self._local.conn = conn
        try:
            yield
            conn.commit()
        except mysql.connector.Error as exc:
            conn.rollback()
            raise translate_storage_error(exc) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()

    def ping(self) -> bool:
        try:
            conn = self.connect()
        except mysql.connector.Error:
            logger.exception("Database connection failed")
            return False
        try:
            return bool(conn.is_connected())
        finally:
            conn.close()
