"""Backend contract: table-oriented data calls plus account/session calls.

Every business operation talks to storage through a ``Backend`` instance that is
constructed once and injected, so a SQL database, a hosted REST service or a
test double can stand behind the same calls.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

Row = Dict[str, Any]
Filters = Mapping[str, Any]


class BackendError(Exception):
    """Error object returned by the backend; ``message`` is user-presentable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BackendAuthError(BackendError):
    """Bad credentials, expired or revoked session."""


class BackendConflictError(BackendError):
    """A uniqueness constraint rejected the write."""


class BackendNotFoundError(BackendError):
    pass


@dataclass(frozen=True)
class BackendUser:
    id: UUID
    email: str


@dataclass(frozen=True)
class BackendSession:
    access_token: str
    user: BackendUser


class Backend(ABC):
    # --- Data ---
    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """Rows of ``table`` whose columns equal every value in ``filters``."""

    @abstractmethod
    async def insert(self, table: str, values: Row) -> Row:
        """Insert one row and return it as stored."""

    @abstractmethod
    async def update(self, table: str, filters: Filters, values: Row) -> List[Row]:
        """Update matching rows and return them as stored."""

    @abstractmethod
    async def delete(self, table: str, filters: Filters) -> int:
        """Delete matching rows and return how many were removed."""

    async def select_one(self, table: str, filters: Filters) -> Optional[Row]:
        rows = await self.select(table, filters, limit=1)
        return rows[0] if rows else None

    # --- Auth ---
    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> BackendSession:
        ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def get_user(self, access_token: str) -> BackendUser:
        ...

    # --- Account administration ---
    @abstractmethod
    async def create_user(self, email: str, password: Optional[str] = None) -> BackendUser:
        """Create an account; without a password the account is invited."""

    @abstractmethod
    async def delete_user(self, user_id: UUID) -> None:
        ...

    @abstractmethod
    async def list_users(self) -> List[BackendUser]:
        ...

    def with_token(self, access_token: str) -> "Backend":
        """Backend acting on behalf of the session holding ``access_token``."""
        return self

    async def prepare(self) -> None:
        """Hook run once at application startup."""
        return None

    async def close(self) -> None:
        return None
