"""
Shared route dependencies.

The store lives on `app.state.store`, created once by `create_app()`; services
are cheap wrappers built per request around it.
"""

from __future__ import annotations

from fastapi import Depends, Request

from .repositories import Store
from .services import TodoService, UserService


def get_app_store(request: Request) -> Store:
    return request.app.state.store


def get_user_service(store: Store = Depends(get_app_store)) -> UserService:
    return UserService(store)


def get_todo_service(store: Store = Depends(get_app_store)) -> TodoService:
    return TodoService(store)
