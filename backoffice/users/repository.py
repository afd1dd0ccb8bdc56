# =============================================================================
# BACKOFFICE SERVICE - USER REPOSITORY
# =============================================================================
# File: backoffice/users/repository.py
# Description: Data access layer for users
#              One interface, two strategies: ORM sessions or raw SQL
# =============================================================================

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, String, bindparam, delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backoffice.core.exceptions import (
    DatabaseNotConnectedError,
    DatabaseQueryError,
    UserExistsError,
    UserNotFoundError,
)
from backoffice.db.base import AccessMode, Driver, SessionFactory
from backoffice.db.models import User


# Columns callers may change through update()
UPDATABLE_COLUMNS = (
    "email",
    "username",
    "password",
    "first_name",
    "last_name",
    "role",
    "active",
    "updated_at",
)


def is_duplicate_email(error: IntegrityError) -> bool:
    """
    True when the violated constraint is the unique index on users.email.

    Matches the messages of SQLite ("UNIQUE constraint failed: users.email"),
    PostgreSQL ("duplicate key value violates unique constraint
    "ix_users_email"") and MySQL ("Duplicate entry ... for key
    'users.ix_users_email'").
    """
    reason = str(error.orig).lower()
    return ("unique" in reason or "duplicate" in reason) and "email" in reason


@asynccontextmanager
async def translate_errors(operation: str) -> AsyncGenerator[None, None]:
    """
    Map driver errors onto the service exception hierarchy.

    The driver error stays chained as __cause__ for the logs; nothing from
    it is copied into the raised exception.
    """
    try:
        yield
    except IntegrityError as e:
        if is_duplicate_email(e):
            raise UserExistsError("email") from e
        raise DatabaseQueryError(message=f"failed to {operation}") from e
    except SQLAlchemyError as e:
        raise DatabaseQueryError(message=f"failed to {operation}") from e


class UserRepository(ABC):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    USER REPOSITORY                                       │
    │  Data access layer for User entity operations                           │
    │  Provides clean separation between business logic and data access       │
    └─────────────────────────────────────────────────────────────────────────┘

    Both implementations return User entities and raise the same exceptions:
        - UserExistsError on unique email violations
        - DatabaseQueryError on any other constraint violation
        - UserNotFoundError when updating a missing id
        - DatabaseQueryError on any other database failure
    """

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a fully populated user."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """User by primary key, None when missing."""

    @abstractmethod
    async def get_by_email(self, email: str, active_only: bool = False) -> Optional[User]:
        """User by email, optionally restricted to active accounts."""

    @abstractmethod
    async def update(self, user_id: str, changes: Dict[str, Any]) -> User:
        """Apply column changes and return the stored row."""

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Delete by id; False when no row matched."""

    @abstractmethod
    async def list_users(self, limit: int, offset: int) -> List[User]:
        """Page of users, newest first."""

    @abstractmethod
    async def count_users(self) -> int:
        """Total number of users."""

    async def exists_email(self, email: str) -> bool:
        return await self.get_by_email(email) is not None


# =============================================================================
# ORM STRATEGY
# =============================================================================

class OrmUserRepository(UserRepository):
    """
    Repository backed by SQLAlchemy ORM sessions.

    Each call runs in its own session that commits on success and rolls
    back on error.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        async with translate_errors(operation):
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

    async def create(self, user: User) -> User:
        async with self._session("create user") as session:
            session.add(user)
            await session.flush()
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        async with self._session("get user") as session:
            result = await session.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()

    async def get_by_email(self, email: str, active_only: bool = False) -> Optional[User]:
        query = select(User).where(User.email == email)
        if active_only:
            query = query.where(User.active.is_(True))

        async with self._session("get user") as session:
            result = await session.execute(query)
            return result.scalar_one_or_none()

    async def update(self, user_id: str, changes: Dict[str, Any]) -> User:
        async with self._session("update user") as session:
            user = await session.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            for key, value in changes.items():
                if key in UPDATABLE_COLUMNS:
                    setattr(user, key, value)
            await session.flush()
        return user

    async def delete(self, user_id: str) -> bool:
        async with self._session("delete user") as session:
            result = await session.execute(delete(User).where(User.id == user_id))
            return result.rowcount > 0

    async def list_users(self, limit: int, offset: int) -> List[User]:
        query = (
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._session("list users") as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def count_users(self) -> int:
        async with self._session("count users") as session:
            result = await session.execute(select(func.count()).select_from(User))
            return result.scalar() or 0


# =============================================================================
# RAW SQL STRATEGY
# =============================================================================

USER_COLUMNS = (
    "id, email, username, password, first_name, last_name, "
    "role, active, created_at, updated_at"
)

# Result column types so every backend yields the same Python values
USER_RESULT_TYPES = {
    "id": String,
    "email": String,
    "username": String,
    "password": String,
    "first_name": String,
    "last_name": String,
    "role": String,
    "active": Boolean,
    "created_at": DateTime(timezone=True),
    "updated_at": DateTime(timezone=True),
}

# Parameter types for values that need dialect conversion
TYPED_PARAMS = (
    bindparam("active", type_=Boolean),
    bindparam("created_at", type_=DateTime(timezone=True)),
    bindparam("updated_at", type_=DateTime(timezone=True)),
)


def _select(where: str = "", suffix: str = ""):
    sql = f"SELECT {USER_COLUMNS} FROM users"
    if where:
        sql = f"{sql} WHERE {where}"
    if suffix:
        sql = f"{sql} {suffix}"
    return text(sql).columns(**USER_RESULT_TYPES)


def _with_types(sql: str, names: List[str]):
    stmt = text(sql)
    params = [param for param in TYPED_PARAMS if param.key in names]
    if params:
        stmt = stmt.bindparams(*params)
    return stmt


class SqlUserRepository(UserRepository):
    """
    Repository issuing parameterized SQL directly on the engine.

    Statements use named parameters, which SQLAlchemy renders in the
    placeholder style of the active client ($1 for asyncpg, %s for aiomysql).
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def create(self, user: User) -> User:
        values = {column: getattr(user, column) for column in USER_RESULT_TYPES}
        stmt = _with_types(
            f"INSERT INTO users ({USER_COLUMNS}) VALUES "
            "(:id, :email, :username, :password, :first_name, :last_name, "
            ":role, :active, :created_at, :updated_at)",
            list(values),
        )
        async with translate_errors("create user"):
            async with self._engine.begin() as conn:
                await conn.execute(stmt, values)
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self._fetch_one(_select("id = :id"), {"id": user_id})

    async def get_by_email(self, email: str, active_only: bool = False) -> Optional[User]:
        if active_only:
            stmt = _select("email = :email AND active = :active").bindparams(
                bindparam("active", type_=Boolean)
            )
            return await self._fetch_one(stmt, {"email": email, "active": True})
        return await self._fetch_one(_select("email = :email"), {"email": email})

    async def update(self, user_id: str, changes: Dict[str, Any]) -> User:
        columns = [column for column in UPDATABLE_COLUMNS if column in changes]
        if columns:
            assignments = ", ".join(f"{column} = :{column}" for column in columns)
            stmt = _with_types(
                f"UPDATE users SET {assignments} WHERE id = :id", columns
            )
            params = {column: changes[column] for column in columns}
            params["id"] = user_id

            async with translate_errors("update user"):
                async with self._engine.begin() as conn:
                    await conn.execute(stmt, params)

        user = await self.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def delete(self, user_id: str) -> bool:
        async with translate_errors("delete user"):
            async with self._engine.begin() as conn:
                result = await conn.execute(
                    text("DELETE FROM users WHERE id = :id"), {"id": user_id}
                )
                return result.rowcount > 0

    async def list_users(self, limit: int, offset: int) -> List[User]:
        stmt = _select(
            suffix="ORDER BY created_at DESC, id DESC LIMIT :limit OFFSET :offset"
        )
        async with translate_errors("list users"):
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt, {"limit": limit, "offset": offset})
                return [User(**row._mapping) for row in result]

    async def count_users(self) -> int:
        async with translate_errors("count users"):
            async with self._engine.connect() as conn:
                result = await conn.execute(text("SELECT COUNT(*) FROM users"))
                return result.scalar() or 0

    async def _fetch_one(self, stmt, params: Dict[str, Any]) -> Optional[User]:
        async with translate_errors("get user"):
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt, params)
                row = result.first()
        if row is None:
            return None
        return User(**row._mapping)


def build_user_repository(driver: Driver) -> UserRepository:
    """
    Pick the repository strategy matching the driver's access mode.

    Raises:
        DatabaseNotConnectedError: If the driver has no usable handle
    """
    if driver.access_mode == AccessMode.ORM:
        session_factory = driver.get_orm_db()
        if session_factory is None:
            raise DatabaseNotConnectedError(driver.type.value)
        return OrmUserRepository(session_factory)

    engine = driver.get_sql_db()
    if engine is None:
        raise DatabaseNotConnectedError(driver.type.value)
    return SqlUserRepository(engine)
