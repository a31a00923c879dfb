"""User Routes - HTTP surface of the user resource.

Invariants:
    - Routes never decide outcomes: UserHandler raises, error_handlers serialize
    - GET /users/{id} returns the bare projection object
    - {id} is passed to the handler as received (string)

Design Decisions:
    - get_user_handler is the single construction point: tests override it (or
      get_pool) through app.dependency_overrides
"""

from functools import partial

from fastapi import APIRouter, Depends, status

from book_api.config import get_settings
from book_api.infrastructure.database import ConnectionPool, get_pool
from book_api.infrastructure.security.password import get_password_hash
from book_api.schemas.user import (
    MessageResponse,
    UserCreate,
    UserCreated,
    UserResponse,
    UserUpdate,
)
from book_api.services.handle_users import UserHandler

router = APIRouter(prefix="/users", tags=["users"])


def get_user_handler(pool: ConnectionPool = Depends(get_pool)) -> UserHandler:
    """FastAPI dependency wiring the pool and the configured bcrypt cost."""
    rounds = get_settings().bcrypt_rounds
    return UserHandler(pool, partial(get_password_hash, rounds=rounds))


@router.get("", response_model=list[UserResponse])
async def list_users(handler: UserHandler = Depends(get_user_handler)):
    """List every user."""
    return await handler.list_users()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, handler: UserHandler = Depends(get_user_handler)):
    return await handler.get_user(user_id)


@router.post(
    "", response_model=UserCreated, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate, handler: UserHandler = Depends(get_user_handler),
):
    """Create a user; the password is hashed before it reaches the store."""
    new_id = await handler.create_user(
        body.email, body.display_name, body.password,
    )
    return UserCreated(user_id=new_id)


@router.put("/{user_id}", response_model=MessageResponse)
async def update_user(
    user_id: str,
    body: UserUpdate,
    handler: UserHandler = Depends(get_user_handler),
):
    """Update display_name only; other body fields are ignored."""
    await handler.update_user(user_id, body.display_name)
    return MessageResponse(message="User updated")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str, handler: UserHandler = Depends(get_user_handler),
):
    await handler.delete_user(user_id)
    return MessageResponse(message="User deleted")
