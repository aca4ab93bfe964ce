from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    Storage-level representation of a User.

    Fields:
    - id: Unique integer identifier, assigned by the store, never reused
    - name: Display name (non-empty)
    - email: Contact email (non-empty, format unchecked)
    - created_at: Creation timestamp
    """

    id: int
    name: str
    email: str
    created_at: datetime


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Storage-level representation of a Todo item.

    Fields:
    - id: Unique integer identifier, independent of user ids
    - user_id: Id of the owning user at creation time
    - title: Short title (non-empty)
    - description: Free text, may be empty
    - completed: Completion flag, the only field mutable after creation
    - created_at: Creation timestamp
    - updated_at: Last status change timestamp
    """

    id: int
    user_id: int
    title: str
    description: str
    completed: bool
    created_at: datetime
    updated_at: datetime
