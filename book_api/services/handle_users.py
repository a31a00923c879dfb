"""User Handlers - list, get, create, update and delete for the user resource.

Invariants:
    - Validation failures short-circuit before any hash or store call
    - An id that cannot be a stored key (non-digit, zero, beyond INTEGER range)
      is NotFound without a store call
    - create_user hashes first (worker thread), then issues exactly one insert;
      no connection is held while hashing
    - Store outcomes are mapped here and nowhere else:
      DuplicateKeyError -> ConflictError, StoreError -> InternalError,
      zero rows / zero affected rows -> NotFoundError
    - The credential hash is never selected (PUBLIC_COLUMNS)
    - No retries: every failure surfaces immediately

Design Decisions:
    - Pool and hasher injected at construction: tests pass fakes, no globals
    - Email uniqueness is left to the store's unique index; two concurrent creates
      race there and the loser gets ConflictError
    - Each operation binds its name into the logging context, so pool and
      error-handler records carry it too
"""

import asyncio
import logging

from sqlalchemy import delete, insert, select, update
from sqlalchemy.sql.expression import Executable

from book_api.core.errors import (
    ConflictError,
    DuplicateKeyError,
    ErrorContext,
    InternalError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from book_api.core.repository_protocols import PasswordHasher, StorePool, WriteOutcome
from book_api.infrastructure.observability import bind_operation
from book_api.models.user import PUBLIC_COLUMNS, User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# users.user_id is INTEGER (int4 on PostgreSQL); autoincrement starts at 1
MAX_USER_ID = 2**31 - 1


def parse_user_id(user_id: object) -> int | None:
    """Store key for a path id, or None when no row can carry it."""
    if isinstance(user_id, bool):
        return None
    if isinstance(user_id, int):
        key = user_id
    elif isinstance(user_id, str) and user_id.isascii() and user_id.isdigit():
        key = int(user_id)
    else:
        return None
    return key if 1 <= key <= MAX_USER_ID else None


class UserHandler:
    """Orchestrates validation, hashing and store calls for the user resource."""

    def __init__(self, pool: StorePool, hasher: PasswordHasher):
        self.pool = pool
        self.hasher = hasher

    async def list_users(self) -> list[dict]:
        """All users, ordered by id. An empty list is a success."""
        bind_operation("list_users")
        stmt = select(*PUBLIC_COLUMNS).order_by(User.user_id)
        return await self._fetch(stmt, ErrorContext(operation="list_users"))

    async def get_user(self, user_id: object) -> dict:
        bind_operation("get_user")
        ctx = ErrorContext(user_id=str(user_id), operation="get_user")
        key = self._key(user_id, ctx)
        stmt = select(*PUBLIC_COLUMNS).where(User.user_id == key)
        rows = await self._fetch(stmt, ctx)
        if not rows:
            raise NotFoundError(user_id, ctx)
        return rows[0]

    async def create_user(
        self,
        email: str | None,
        display_name: str | None,
        password: str | None,
    ) -> object:
        """Validate, hash, insert. Returns the store-assigned id."""
        bind_operation("create_user")
        ctx = ErrorContext(operation="create_user")
        if not email or not display_name or not password:
            raise ValidationError(
                "Email, display name, and password are required", ctx,
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                ctx,
            )
        try:
            password.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError("Password must be valid UTF-8 text", ctx) from e

        try:
            password_hash = await asyncio.to_thread(self.hasher, password)
        except Exception as e:
            raise InternalError.from_hashing(e, ctx) from e

        stmt = insert(User).values(
            email=email, display_name=display_name, password_hash=password_hash,
        )
        try:
            outcome = await self.pool.execute(stmt)
        except DuplicateKeyError as e:
            raise ConflictError(context=ctx) from e
        except StoreError as e:
            raise InternalError(str(e), context=ctx) from e

        logger.info("User created", extra={"user_id": outcome.last_id})
        return outcome.last_id

    async def update_user(self, user_id: object, display_name: str | None) -> None:
        """Set display_name. Re-applying the same value succeeds again."""
        bind_operation("update_user")
        ctx = ErrorContext(user_id=str(user_id), operation="update_user")
        if not display_name:
            raise ValidationError("Display name is required", ctx)
        key = self._key(user_id, ctx)
        stmt = (
            update(User)
            .where(User.user_id == key)
            .values(display_name=display_name)
        )
        outcome = await self._write(stmt, ctx)
        if outcome.rowcount == 0:
            raise NotFoundError(user_id, ctx)
        logger.info("User updated", extra={"user_id": key})

    async def delete_user(self, user_id: object) -> None:
        """Remove the row. Deleting an already-deleted id is NotFound."""
        bind_operation("delete_user")
        ctx = ErrorContext(user_id=str(user_id), operation="delete_user")
        key = self._key(user_id, ctx)
        stmt = delete(User).where(User.user_id == key)
        outcome = await self._write(stmt, ctx)
        if outcome.rowcount == 0:
            raise NotFoundError(user_id, ctx)
        logger.info("User deleted", extra={"user_id": key})

    # -- store calls -----------------------------------------------------------

    @staticmethod
    def _key(user_id: object, ctx: ErrorContext) -> int:
        key = parse_user_id(user_id)
        if key is None:
            raise NotFoundError(user_id, ctx)
        return key

    async def _fetch(self, stmt: Executable, ctx: ErrorContext) -> list[dict]:
        try:
            return await self.pool.fetch_all(stmt)
        except StoreError as e:
            raise InternalError(str(e), context=ctx) from e

    async def _write(self, stmt: Executable, ctx: ErrorContext) -> WriteOutcome:
        try:
            return await self.pool.execute(stmt)
        except StoreError as e:
            raise InternalError(str(e), context=ctx) from e
