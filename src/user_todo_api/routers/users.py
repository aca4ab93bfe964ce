from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_user_service
from ..schemas import DeletedOut, ErrorOut, UserCreate, UserOut, UserPage
from ..services import UserService

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="Create a new user and return the created resource.",
    responses={
        201: {"description": "User created successfully"},
        400: {"model": ErrorOut, "description": "Validation error"},
    },
)
def create_user(payload: UserCreate, svc: UserService = Depends(get_user_service)) -> UserOut:
    """
    Create a new User.
    """
    return UserOut(**svc.create(payload))


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=UserPage,
    summary="List Users",
    description=(
        "List users in creation order.\n\n"
        "Query parameters:\n"
        "- limit: max number of items to return (0..1000), all when omitted\n"
        "- offset: number of items to skip (>=0)"
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"model": ErrorOut, "description": "Invalid query parameters"},
    },
)
def list_users(
    limit: Optional[int] = Query(None, ge=0, le=1000, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    svc: UserService = Depends(get_user_service),
) -> UserPage:
    """
    List users with optional pagination.
    """
    items, total = svc.list(limit=limit, offset=offset)
    return UserPage(items=[UserOut(**u) for u in items], total=total, limit=limit, offset=offset)


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserOut,
    summary="Get User",
    description="Get a single user by ID.",
    responses={
        200: {"description": "User found"},
        404: {"model": ErrorOut, "description": "User not found"},
    },
)
def get_user(user_id: int, svc: UserService = Depends(get_user_service)) -> UserOut:
    """
    Retrieve a single User by its ID.
    """
    return UserOut(**svc.get(user_id))


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    response_model=DeletedOut,
    summary="Delete User",
    description=(
        "Delete a user by ID. Todos owned by the user are kept and keep "
        "referencing the deleted user's id."
    ),
    responses={
        200: {"description": "User deleted"},
        404: {"model": ErrorOut, "description": "User not found"},
    },
)
def delete_user(user_id: int, svc: UserService = Depends(get_user_service)) -> DeletedOut:
    """
    Delete a User. Returns 200 with the deleted id, 404 if not found.
    """
    svc.delete(user_id)
    return DeletedOut(id=user_id)
