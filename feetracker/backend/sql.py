"""Backend implemented directly over an async SQLAlchemy engine."""

import logging
import uuid
from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from jose import JWTError
from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.types import Date, Uuid

from feetracker.auth.security import create_token, decode_token, hash_password, verify_password
from feetracker.backend.base import (
    Backend,
    BackendAuthError,
    BackendConflictError,
    BackendError,
    BackendNotFoundError,
    BackendSession,
    BackendUser,
    Filters,
    Row,
)
from feetracker.db.models import AuthSession, AuthUser
from feetracker.db.session import Base, build_engine, build_sessionmaker, create_schema

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


class SqlBackend(Backend):
    """Table calls map to Core statements on ``Base.metadata`` tables.

    Access tokens are JWTs signed with ``secret_key`` that reference a row in
    ``auth_sessions``; signing out deletes the row.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        secret_key: str,
        token_expire_minutes: int = 720,
        engine: Optional[AsyncEngine] = None,
    ) -> None:
        self._session_factory = session_factory
        self._secret_key = secret_key
        self._token_expire_minutes = token_expire_minutes
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str, secret_key: str, **kwargs) -> "SqlBackend":
        engine = build_engine(database_url)
        return cls(build_sessionmaker(engine), secret_key, engine=engine, **kwargs)

    async def prepare(self) -> None:
        if self._engine is not None:
            await create_schema(self._engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None or name.startswith("auth_"):
            raise BackendError(f'relation "{name}" does not exist')
        return table

    @staticmethod
    def _coerce(table: Table, column: str, value: Any) -> Any:
        if column not in table.c:
            raise BackendError(f'column "{column}" of relation "{table.name}" does not exist')
        col_type = table.c[column].type
        if isinstance(value, str):
            if isinstance(col_type, Uuid):
                try:
                    return UUID(value)
                except ValueError as e:
                    raise BackendError(f'invalid input syntax for type uuid: "{value}"') from e
            if isinstance(col_type, Date):
                try:
                    return date.fromisoformat(value)
                except ValueError as e:
                    raise BackendError(f'invalid input syntax for type date: "{value}"') from e
        return value

    def _where(self, table: Table, stmt, filters: Optional[Filters]):
        for column, value in (filters or {}).items():
            value = self._coerce(table, column, value)
            stmt = stmt.where(table.c[column] == value)
        return stmt

    def _values(self, table: Table, values: Row) -> Row:
        return {column: self._coerce(table, column, value) for column, value in values.items()}

    @staticmethod
    def _integrity_error(table: Table, e: IntegrityError) -> BackendError:
        detail = str(e.orig).lower()
        if "unique" in detail or "duplicate" in detail:
            return BackendConflictError(
                f'duplicate key value violates unique constraint on "{table.name}"'
            )
        return BackendError(f'write to "{table.name}" violates a constraint')

    # --- Data ---
    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        t = self._table(table)
        stmt = self._where(t, select(t), filters)
        if order_by is not None:
            if order_by not in t.c:
                raise BackendError(f'column "{order_by}" of relation "{table}" does not exist')
            stmt = stmt.order_by(t.c[order_by].desc() if descending else t.c[order_by])
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            logger.exception("select on %s failed", table)
            raise BackendError(f'Failed to read "{table}"') from e

    async def insert(self, table: str, values: Row) -> Row:
        t = self._table(table)
        stmt = insert(t).values(**self._values(t, values)).returning(*t.c)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return dict(result.mappings().one())
        except IntegrityError as e:
            raise self._integrity_error(t, e) from e
        except SQLAlchemyError as e:
            logger.exception("insert into %s failed", table)
            raise BackendError(f'Failed to write "{table}"') from e

    async def update(self, table: str, filters: Filters, values: Row) -> List[Row]:
        t = self._table(table)
        stmt = self._where(t, update(t), filters).values(**self._values(t, values)).returning(*t.c)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return [dict(row) for row in result.mappings().all()]
        except IntegrityError as e:
            raise self._integrity_error(t, e) from e
        except SQLAlchemyError as e:
            logger.exception("update of %s failed", table)
            raise BackendError(f'Failed to update "{table}"') from e

    async def delete(self, table: str, filters: Filters) -> int:
        t = self._table(table)
        stmt = self._where(t, delete(t), filters)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return result.rowcount or 0
        except IntegrityError as e:
            raise self._integrity_error(t, e) from e
        except SQLAlchemyError as e:
            logger.exception("delete from %s failed", table)
            raise BackendError(f'Failed to delete from "{table}"') from e

    # --- Auth ---
    async def sign_in_with_password(self, email: str, password: str) -> BackendSession:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuthUser).where(func.lower(AuthUser.email) == email.strip().lower())
            )
            user = result.scalar_one_or_none()
            if not user or not user.password_hash or not verify_password(password, user.password_hash):
                raise BackendAuthError(INVALID_CREDENTIALS)

            auth_session = AuthSession(id=uuid.uuid4(), user_id=user.id)
            session.add(auth_session)
            await session.commit()

        token = create_token(
            subject={"sub": str(user.id), "sid": str(auth_session.id), "email": user.email},
            secret_key=self._secret_key,
            expires_minutes=self._token_expire_minutes,
        )
        return BackendSession(access_token=token, user=BackendUser(id=user.id, email=user.email))

    def _claims(self, access_token: str) -> dict:
        try:
            claims = decode_token(access_token, self._secret_key)
            return {"sub": UUID(claims["sub"]), "sid": UUID(claims["sid"])}
        except (JWTError, KeyError, ValueError) as e:
            raise BackendAuthError("Invalid JWT") from e

    async def sign_out(self, access_token: str) -> None:
        claims = self._claims(access_token)
        async with self._session_factory() as session:
            await session.execute(delete(AuthSession).where(AuthSession.id == claims["sid"]))
            await session.commit()

    async def get_user(self, access_token: str) -> BackendUser:
        claims = self._claims(access_token)
        async with self._session_factory() as session:
            result = await session.execute(
                select(AuthUser)
                .join(AuthSession, AuthSession.user_id == AuthUser.id)
                .where(AuthSession.id == claims["sid"], AuthUser.id == claims["sub"])
            )
            user = result.scalar_one_or_none()
        if not user:
            raise BackendAuthError("Session not found")
        return BackendUser(id=user.id, email=user.email)

    # --- Account administration ---
    async def create_user(self, email: str, password: Optional[str] = None) -> BackendUser:
        user = AuthUser(
            id=uuid.uuid4(),
            email=email.strip(),
            password_hash=hash_password(password) if password else None,
        )
        async with self._session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise BackendConflictError("A user with this email address has already been registered") from e
        return BackendUser(id=user.id, email=user.email)

    async def delete_user(self, user_id: UUID) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(AuthSession).where(AuthSession.user_id == user_id))
            result = await session.execute(delete(AuthUser).where(AuthUser.id == user_id))
            await session.commit()
        if not result.rowcount:
            raise BackendNotFoundError("User not found")

    async def list_users(self) -> List[BackendUser]:
        async with self._session_factory() as session:
            result = await session.execute(select(AuthUser).order_by(AuthUser.created_at))
            return [BackendUser(id=u.id, email=u.email) for u in result.scalars().all()]
