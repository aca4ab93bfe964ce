from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar

from .errors import NotFound, UserNotFound
from .models import TodoEntity, UserEntity
from .settings import Settings, get_settings
from .validation import require_text

T = TypeVar("T")


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing users or todos.

    `limit=None` returns every record after `offset`. `user_id` and
    `completed` only apply to todos.
    """
    limit: Optional[int] = None
    offset: int = 0
    user_id: Optional[int] = None
    completed: Optional[bool] = None


def _page(items: Sequence[T], query: ListQuery) -> List[T]:
    start = max(query.offset, 0)
    if query.limit is None:
        return list(items[start:])
    return list(items[start:start + max(query.limit, 0)])


# PUBLIC_INTERFACE
class Store(ABC):
    """
    Abstract contract for User/Todo storage backends.

    Every operation is atomic with respect to concurrent callers. Lookups of
    missing records raise NotFound; records returned are copies.
    """

    @abstractmethod
    def create_user(self, name: str, email: str) -> UserEntity:
        """Create and return a new user. Raises InvalidInput on empty name/email."""

    @abstractmethod
    def get_user(self, user_id: int) -> UserEntity:
        """Return a user by id. Raises NotFound."""

    @abstractmethod
    def list_users(self, query: Optional[ListQuery] = None) -> Tuple[List[UserEntity], int]:
        """Return a page of users in insertion order and the total count."""

    @abstractmethod
    def delete_user(self, user_id: int) -> None:
        """
        Delete a user by id. Raises NotFound.
        Todos referencing the user are left untouched.
        """

    @abstractmethod
    def create_todo(self, user_id: int, title: str, description: str = "") -> TodoEntity:
        """
        Create and return a new todo, initially not completed.
        Raises UserNotFound if the user does not exist at call time and
        InvalidInput if the title is empty.
        """

    @abstractmethod
    def get_todo(self, todo_id: int) -> TodoEntity:
        """Return a todo by id. Raises NotFound."""

    @abstractmethod
    def list_todos(self, query: Optional[ListQuery] = None) -> Tuple[List[TodoEntity], int]:
        """Return a page of todos in insertion order and the total count."""

    @abstractmethod
    def set_todo_status(self, todo_id: int, completed: bool) -> TodoEntity:
        """Set the completion flag of a todo and return it. Raises NotFound."""

    @abstractmethod
    def delete_todo(self, todo_id: int) -> None:
        """Delete a todo by id. Raises NotFound."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""


class InMemoryStore(Store):
    """
    Thread-safe in-memory store, the default runtime backend.

    Users and todos are guarded by separate locks. When both are needed the
    users lock is always taken first.
    """

    def __init__(self) -> None:
        self._users_lock = RLock()
        self._todos_lock = RLock()
        self._users: Dict[int, UserEntity] = {}
        self._todos: Dict[int, TodoEntity] = {}
        self._next_user_id = 1
        self._next_todo_id = 1

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    # Users

    def create_user(self, name: str, email: str) -> UserEntity:
        name = require_text(name, "name")
        email = require_text(email, "email")
        with self._users_lock:
            entity: UserEntity = {
                "id": self._next_user_id,
                "name": name,
                "email": email,
                "created_at": self._now(),
            }
            self._next_user_id += 1
            self._users[entity["id"]] = entity
            return entity.copy()

    def get_user(self, user_id: int) -> UserEntity:
        with self._users_lock:
            item = self._users.get(user_id)
            if item is None:
                raise NotFound(f"User {user_id} not found")
            return item.copy()

    def list_users(self, query: Optional[ListQuery] = None) -> Tuple[List[UserEntity], int]:
        q = query or ListQuery()
        with self._users_lock:
            # dicts keep insertion order, which is also id order
            items = [u.copy() for u in self._users.values()]
        return _page(items, q), len(items)

    def delete_user(self, user_id: int) -> None:
        with self._users_lock:
            if self._users.pop(user_id, None) is None:
                raise NotFound(f"User {user_id} not found")

    # Todos

    def create_todo(self, user_id: int, title: str, description: str = "") -> TodoEntity:
        title = require_text(title, "title")
        if description is None:
            description = ""
        with self._users_lock:
            if user_id not in self._users:
                raise UserNotFound(f"User {user_id} not found")
            with self._todos_lock:
                now = self._now()
                entity: TodoEntity = {
                    "id": self._next_todo_id,
                    "user_id": user_id,
                    "title": title,
                    "description": description,
                    "completed": False,
                    "created_at": now,
                    "updated_at": now,
                }
                self._next_todo_id += 1
                self._todos[entity["id"]] = entity
                return entity.copy()

    def get_todo(self, todo_id: int) -> TodoEntity:
        with self._todos_lock:
            item = self._todos.get(todo_id)
            if item is None:
                raise NotFound(f"Todo {todo_id} not found")
            return item.copy()

    def list_todos(self, query: Optional[ListQuery] = None) -> Tuple[List[TodoEntity], int]:
        q = query or ListQuery()
        with self._todos_lock:
            items = [
                t.copy()
                for t in self._todos.values()
                if (q.user_id is None or t["user_id"] == q.user_id)
                and (q.completed is None or t["completed"] == q.completed)
            ]
        return _page(items, q), len(items)

    def set_todo_status(self, todo_id: int, completed: bool) -> TodoEntity:
        with self._todos_lock:
            existing = self._todos.get(todo_id)
            if existing is None:
                raise NotFound(f"Todo {todo_id} not found")
            updated = existing.copy()
            updated["completed"] = bool(completed)
            updated["updated_at"] = self._now()
            self._todos[todo_id] = updated
            return updated.copy()

    def delete_todo(self, todo_id: int) -> None:
        with self._todos_lock:
            if self._todos.pop(todo_id, None) is None:
                raise NotFound(f"Todo {todo_id} not found")


# PUBLIC_INTERFACE
def get_store(settings: Optional[Settings] = None) -> Store:
    """
    Factory to build the configured store.
    - memory: InMemoryStore
    - sqlite: SQLiteStore at settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteStore

        return SQLiteStore(settings.sqlite_db_path)
    return InMemoryStore()
