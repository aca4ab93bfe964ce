from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Generator, List, Optional, Tuple

from .errors import NotFound, UserNotFound
from .models import TodoEntity, UserEntity
from .repositories import ListQuery, Store
from .validation import require_text


@dataclass(frozen=True)
class _UserCols:
    table: str = "users"
    id: str = "id"
    name: str = "name"
    email: str = "email"
    created_at: str = "created_at"


@dataclass(frozen=True)
class _TodoCols:
    table: str = "todos"
    id: str = "id"
    user_id: str = "user_id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_U = _UserCols()
_T = _TodoCols()

# SQLite INTEGER is a signed 64-bit value
_SQLITE_INT_MIN = -(2 ** 63)
_SQLITE_INT_MAX = 2 ** 63 - 1


def _storable(value: int) -> bool:
    return _SQLITE_INT_MIN <= value <= _SQLITE_INT_MAX


class SQLiteStore(Store):
    """
    SQLite-backed store implementing the Store interface.

    AUTOINCREMENT keys guarantee ids are never reused. Writes are serialized by
    a lock and each runs in a single transaction, so the user check and the
    todo insert of create_todo are observed together.
    """

    def __init__(self, db_path: str) -> None:
        if db_path == ":memory:":
            raise ValueError("SQLiteStore needs a file path; use InMemoryStore for in-process storage")
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._write_lock = Lock()
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_U.table} (
                    {_U.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_U.name} TEXT NOT NULL,
                    {_U.email} TEXT NOT NULL,
                    {_U.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_T.table} (
                    {_T.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_T.user_id} INTEGER NOT NULL,
                    {_T.title} TEXT NOT NULL,
                    {_T.description} TEXT NOT NULL DEFAULT '',
                    {_T.completed} INTEGER NOT NULL DEFAULT 0,
                    {_T.created_at} TEXT NOT NULL,
                    {_T.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_T.table}_user_id ON {_T.table}({_T.user_id})"
            )

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _row_to_user(self, row: sqlite3.Row) -> UserEntity:
        return {
            "id": int(row[_U.id]),
            "name": str(row[_U.name]),
            "email": str(row[_U.email]),
            "created_at": datetime.fromisoformat(row[_U.created_at]),
        }

    def _row_to_todo(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": int(row[_T.id]),
            "user_id": int(row[_T.user_id]),
            "title": str(row[_T.title]),
            "description": row[_T.description] or "",
            "completed": bool(row[_T.completed]),
            "created_at": datetime.fromisoformat(row[_T.created_at]),
            "updated_at": datetime.fromisoformat(row[_T.updated_at]),
        }

    @staticmethod
    def _page_sql(query: ListQuery) -> Tuple[str, list]:
        # SQLite needs a LIMIT clause to accept OFFSET; -1 means unbounded
        limit = -1 if query.limit is None else max(query.limit, 0)
        return "LIMIT ? OFFSET ?", [limit, min(max(query.offset, 0), _SQLITE_INT_MAX)]

    # Users

    def create_user(self, name: str, email: str) -> UserEntity:
        name = require_text(name, "name")
        email = require_text(email, "email")
        with self._write_lock, self._conn() as conn:
            cur = conn.execute(
                f"INSERT INTO {_U.table} ({_U.name}, {_U.email}, {_U.created_at}) VALUES (?, ?, ?)",
                (name, email, self._now()),
            )
            row = conn.execute(f"SELECT * FROM {_U.table} WHERE {_U.id} = ?", (cur.lastrowid,)).fetchone()
            assert row is not None
            return self._row_to_user(row)

    def get_user(self, user_id: int) -> UserEntity:
        if not _storable(user_id):
            raise NotFound(f"User {user_id} not found")
        with self._conn() as conn:
            row = conn.execute(f"SELECT * FROM {_U.table} WHERE {_U.id} = ?", (user_id,)).fetchone()
        if row is None:
            raise NotFound(f"User {user_id} not found")
        return self._row_to_user(row)

    def list_users(self, query: Optional[ListQuery] = None) -> Tuple[List[UserEntity], int]:
        q = query or ListQuery()
        page_sql, page_params = self._page_sql(q)
        with self._conn() as conn:
            # One read transaction so the page and the total agree
            conn.execute("BEGIN")
            total = int(conn.execute(f"SELECT COUNT(*) AS cnt FROM {_U.table}").fetchone()["cnt"])
            rows = conn.execute(
                f"SELECT * FROM {_U.table} ORDER BY {_U.id} ASC {page_sql}", page_params
            ).fetchall()
        return [self._row_to_user(r) for r in rows], total

    def delete_user(self, user_id: int) -> None:
        if not _storable(user_id):
            raise NotFound(f"User {user_id} not found")
        with self._write_lock, self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_U.table} WHERE {_U.id} = ?", (user_id,))
            if cur.rowcount == 0:
                raise NotFound(f"User {user_id} not found")

    # Todos

    def create_todo(self, user_id: int, title: str, description: str = "") -> TodoEntity:
        title = require_text(title, "title")
        if not _storable(user_id):
            raise UserNotFound(f"User {user_id} not found")
        now = self._now()
        with self._write_lock, self._conn() as conn:
            exists = conn.execute(f"SELECT 1 FROM {_U.table} WHERE {_U.id} = ?", (user_id,)).fetchone()
            if exists is None:
                raise UserNotFound(f"User {user_id} not found")
            cur = conn.execute(
                f"""
                INSERT INTO {_T.table} ({_T.user_id}, {_T.title}, {_T.description}, {_T.completed},
                    {_T.created_at}, {_T.updated_at})
                VALUES (?, ?, ?, 0, ?, ?)
                """,
                (user_id, title, description or "", now, now),
            )
            row = conn.execute(f"SELECT * FROM {_T.table} WHERE {_T.id} = ?", (cur.lastrowid,)).fetchone()
            assert row is not None
            return self._row_to_todo(row)

    def get_todo(self, todo_id: int) -> TodoEntity:
        if not _storable(todo_id):
            raise NotFound(f"Todo {todo_id} not found")
        with self._conn() as conn:
            row = conn.execute(f"SELECT * FROM {_T.table} WHERE {_T.id} = ?", (todo_id,)).fetchone()
        if row is None:
            raise NotFound(f"Todo {todo_id} not found")
        return self._row_to_todo(row)

    def list_todos(self, query: Optional[ListQuery] = None) -> Tuple[List[TodoEntity], int]:
        q = query or ListQuery()
        if q.user_id is not None and not _storable(q.user_id):
            # No row can carry an id outside the INTEGER range
            return [], 0
        clauses = []
        params: list = []

        if q.user_id is not None:
            clauses.append(f"{_T.user_id} = ?")
            params.append(q.user_id)

        if q.completed is not None:
            clauses.append(f"{_T.completed} = ?")
            params.append(1 if q.completed else 0)

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        page_sql, page_params = self._page_sql(q)

        with self._conn() as conn:
            conn.execute("BEGIN")
            count_row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM {_T.table} {where_sql}", params
            ).fetchone()
            total = int(count_row["cnt"]) if count_row else 0
            rows = conn.execute(
                f"SELECT * FROM {_T.table} {where_sql} ORDER BY {_T.id} ASC {page_sql}",
                [*params, *page_params],
            ).fetchall()
        return [self._row_to_todo(r) for r in rows], total

    def set_todo_status(self, todo_id: int, completed: bool) -> TodoEntity:
        if not _storable(todo_id):
            raise NotFound(f"Todo {todo_id} not found")
        with self._write_lock, self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_T.table} SET {_T.completed} = ?, {_T.updated_at} = ? WHERE {_T.id} = ?",
                (1 if completed else 0, self._now(), todo_id),
            )
            if cur.rowcount == 0:
                raise NotFound(f"Todo {todo_id} not found")
            row = conn.execute(f"SELECT * FROM {_T.table} WHERE {_T.id} = ?", (todo_id,)).fetchone()
            assert row is not None
            return self._row_to_todo(row)

    def delete_todo(self, todo_id: int) -> None:
        if not _storable(todo_id):
            raise NotFound(f"Todo {todo_id} not found")
        with self._write_lock, self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_T.table} WHERE {_T.id} = ?", (todo_id,))
            if cur.rowcount == 0:
                raise NotFound(f"Todo {todo_id} not found")
