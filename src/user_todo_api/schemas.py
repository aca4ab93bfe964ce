from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

from .validation import require_text


# PUBLIC_INTERFACE
class UserCreate(BaseModel):
    """
    Schema for creating a new User.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Alice",
                "email": "alice@example.com",
            }
        }
    )

    name: StrictStr = Field(..., description="Display name of the user")
    email: StrictStr = Field(..., description="Contact email of the user")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, "name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return require_text(v, "email")


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """
    Schema returned by the API for a User. `id` is always the first key.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Alice",
                "email": "alice@example.com",
                "created_at": "2025-01-25T10:15:30.123456",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the user")
    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Contact email of the user")
    created_at: datetime = Field(..., description="Creation timestamp")


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item owned by an existing user.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": 1,
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        }
    )

    user_id: StrictInt = Field(..., description="Id of the user owning the todo")
    title: StrictStr = Field(..., description="Short title for the todo item")
    description: StrictStr = Field(default="", description="Detailed description, may be empty")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and reject an empty title.
        """
        return require_text(v, "title")


# PUBLIC_INTERFACE
class TodoStatusUpdate(BaseModel):
    """
    Schema for changing the completion status of a Todo item.
    Only a boolean `completed` field is accepted.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"completed": True}},
    )

    completed: StrictBool = Field(..., description="New completion status")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item. `id` is always the first key.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "user_id": 1,
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-25T10:15:30.123456",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    user_id: int = Field(..., description="Id of the owning user")
    title: str = Field(..., description="Short title for the todo item")
    description: str = Field(..., description="Detailed description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last status change timestamp")


class DeletedOut(BaseModel):
    """
    Body returned after a successful delete.
    """

    id: int = Field(..., description="Id of the deleted record")
    deleted: bool = Field(True, description="Always true on success")


class UserPage(BaseModel):
    """
    Envelope for paginated user listings.
    """

    items: List[UserOut] = Field(..., description="List of users")
    total: int = Field(..., description="Total number of users matching the query")
    limit: Optional[int] = Field(None, description="Limit applied to the query, null when unbounded")
    offset: int = Field(..., description="Offset applied to the query")


class TodoPage(BaseModel):
    """
    Envelope for paginated todo listings.
    """

    items: List[TodoOut] = Field(..., description="List of todo items")
    total: int = Field(..., description="Total number of todos matching the query")
    limit: Optional[int] = Field(None, description="Limit applied to the query, null when unbounded")
    offset: int = Field(..., description="Offset applied to the query")


class ErrorOut(BaseModel):
    """
    Body returned for every error response.
    """

    error: str = Field(..., description="Error kind: InvalidInput, NotFound or UserNotFound")
    message: str = Field(..., description="Human readable message")
    detail: Any = Field(None, description="Optional structured detail")
