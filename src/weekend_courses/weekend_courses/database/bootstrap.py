from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "weekend_courses")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_script(target: DBTarget, path: str | Path) -> int:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(target)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _exec_script(_as_target(db_config), schema_path)
    logger.info("Applied %s schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _exec_script(_as_target(db_config), seed_path)
    logger.info("Applied %s seed statements from %s", count, seed_path)


def ensure_demo_accounts(db_config: dict) -> None:
    """Create (or reset) the demo admin and the head teacher of the demo course."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT admin_id FROM admins WHERE email=%s", ("admin@example.com",))
        if cur.fetchone():
            cur.execute(
                "UPDATE admins SET password_hash=%s WHERE email=%s",
                (generate_password_hash("admin123"), "admin@example.com"),
            )
        else:
            cur.execute(
                "INSERT INTO admins (email, full_name, password_hash) VALUES (%s, %s, %s)",
                ("admin@example.com", "Admin Demo", generate_password_hash("admin123")),
            )

        cur.execute("SELECT teacher_id FROM teachers WHERE email=%s", ("head@example.com",))
        row = cur.fetchone()
        if row:
            cur.execute(
                "UPDATE teachers SET password_hash=%s, is_active=1 WHERE teacher_id=%s",
                (generate_password_hash("teacher123"), int(row["teacher_id"])),
            )
        else:
            cur.execute("SELECT course_id FROM courses WHERE name=%s", ("Demo Weekend Course",))
            course = cur.fetchone()
            course_id = int(course["course_id"]) if course else None
            cur.execute(
                """
                INSERT INTO teachers (email, full_name, password_hash, course_id, role)
                VALUES (%s, %s, %s, %s, 'HEAD')
                """,
                ("head@example.com", "Head Teacher", generate_password_hash("teacher123"), course_id),
            )
            if course_id is not None:
                cur.execute(
                    "UPDATE courses SET head_teacher_id=%s WHERE course_id=%s",
                    (int(cur.lastrowid), course_id),
                )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
