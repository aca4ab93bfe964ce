"""
Use cases over the store: the layer routes call into.

Payload shape is already validated by the request schemas when these run;
the services resolve references against the current store state and let
domain errors (InvalidInput, NotFound, UserNotFound) propagate to the
exception handler registered in main.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .errors import NotFound
from .models import TodoEntity, UserEntity
from .repositories import ListQuery, Store
from .schemas import TodoCreate, TodoStatusUpdate, UserCreate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: Store):
        self.store = store

    def create(self, payload: UserCreate) -> UserEntity:
        user = self.store.create_user(payload.name, payload.email)
        logger.info("Created user %s (%s)", user["id"], user["email"])
        return user

    def get(self, user_id: int) -> UserEntity:
        try:
            return self.store.get_user(user_id)
        except NotFound:
            logger.debug("User %s not found", user_id)
            raise

    def list(self, limit: Optional[int] = None, offset: int = 0) -> Tuple[List[UserEntity], int]:
        return self.store.list_users(ListQuery(limit=limit, offset=offset))

    def delete(self, user_id: int) -> None:
        # Todos owned by the user are kept; their user_id is left dangling
        self.store.delete_user(user_id)
        logger.info("Deleted user %s", user_id)


class TodoService:
    def __init__(self, store: Store):
        self.store = store

    def create(self, payload: TodoCreate) -> TodoEntity:
        todo = self.store.create_todo(payload.user_id, payload.title, payload.description)
        logger.info("Created todo %s for user %s", todo["id"], todo["user_id"])
        return todo

    def get(self, todo_id: int) -> TodoEntity:
        try:
            return self.store.get_todo(todo_id)
        except NotFound:
            logger.debug("Todo %s not found", todo_id)
            raise

    def list(
        self,
        limit: Optional[int] = None,
        offset: int = 0,
        user_id: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> Tuple[List[TodoEntity], int]:
        query = ListQuery(limit=limit, offset=offset, user_id=user_id, completed=completed)
        return self.store.list_todos(query)

    def set_status(self, todo_id: int, payload: TodoStatusUpdate) -> TodoEntity:
        todo = self.store.set_todo_status(todo_id, payload.completed)
        logger.info("Todo %s completed=%s", todo_id, todo["completed"])
        return todo

    def delete(self, todo_id: int) -> None:
        self.store.delete_todo(todo_id)
        logger.info("Deleted todo %s", todo_id)
