from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_todo_service
from ..schemas import DeletedOut, ErrorOut, TodoCreate, TodoOut, TodoPage, TodoStatusUpdate
from ..services import TodoService

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item for an existing user and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"model": ErrorOut, "description": "Validation error"},
        404: {"model": ErrorOut, "description": "Referenced user not found"},
    },
)
def create_todo(payload: TodoCreate, svc: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Create a new Todo.
    """
    return TodoOut(**svc.create(payload))


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoPage,
    summary="List Todos",
    description=(
        "List todos in creation order with optional filters and pagination.\n\n"
        "Query parameters:\n"
        "- limit: max number of items to return (0..1000), all when omitted\n"
        "- offset: number of items to skip (>=0)\n"
        "- user_id: only todos owned by this user id\n"
        "- completed: filter by completion status"
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"model": ErrorOut, "description": "Invalid query parameters"},
    },
)
def list_todos(
    limit: Optional[int] = Query(None, ge=0, le=1000, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    user_id: Optional[int] = Query(None, description="Filter by owning user id"),
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    svc: TodoService = Depends(get_todo_service),
) -> TodoPage:
    """
    List todos with pagination and filters.
    """
    items, total = svc.list(limit=limit, offset=offset, user_id=user_id, completed=completed)
    return TodoPage(items=[TodoOut(**it) for it in items], total=total, limit=limit, offset=offset)


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"model": ErrorOut, "description": "Todo not found"},
    },
)
def get_todo(todo_id: int, svc: TodoService = Depends(get_todo_service)) -> TodoOut:
    """
    Retrieve a single Todo item by its ID.
    """
    return TodoOut(**svc.get(todo_id))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}/status",
    response_model=TodoOut,
    summary="Update Todo Status",
    description="Set the completion status of a Todo item. Setting the same value again is a no-op.",
    responses={
        200: {"description": "Todo updated"},
        400: {"model": ErrorOut, "description": "Body is not {\"completed\": <bool>}"},
        404: {"model": ErrorOut, "description": "Todo not found"},
    },
)
def update_todo_status(
    todo_id: int, payload: TodoStatusUpdate, svc: TodoService = Depends(get_todo_service)
) -> TodoOut:
    """
    Change only the `completed` flag of a Todo.
    """
    return TodoOut(**svc.set_status(todo_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=DeletedOut,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        200: {"description": "Todo deleted"},
        404: {"model": ErrorOut, "description": "Todo not found"},
    },
)
def delete_todo(todo_id: int, svc: TodoService = Depends(get_todo_service)) -> DeletedOut:
    """
    Delete a Todo. Returns 200 with the deleted id, 404 if not found.
    """
    svc.delete(todo_id)
    return DeletedOut(id=todo_id)
