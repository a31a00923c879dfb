"""Boundary Protocols - contracts between the user handler and the store/hasher.

Invariants:
    - Handler code depends on these Protocols, never on the concrete pool
    - fetch_all returns plain dicts keyed by projection label
    - execute returns a WriteOutcome; duplicate keys surface as DuplicateKeyError,
      every other failure as StoreError (core/errors.py)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Hasher is a plain synchronous callable: the handler decides where it runs
"""

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from sqlalchemy.sql.expression import Executable


@dataclass(frozen=True)
class WriteOutcome:
    """Result summary of one insert/update/delete."""
    rowcount: int
    last_id: Any | None = None


class StorePool(Protocol):
    """Contract for the connection pool - implemented by infrastructure/database.py."""
    async def fetch_all(self, statement: Executable) -> list[dict]: ...
    async def execute(self, statement: Executable) -> WriteOutcome: ...


PasswordHasher = Callable[[str], str]
