# =============================================================================
# BACKOFFICE SERVICE - DATABASE MODELS
# =============================================================================
# File: backoffice/db/models.py
# Description: SQLAlchemy ORM models shared by the ORM and raw SQL paths
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.db.base import Base
from backoffice.utils.helpers import utc_now


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class UserRole(str, Enum):
    """Roles a user account can hold."""
    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


# =============================================================================
# USER MODEL
# =============================================================================

class User(Base):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    USER MODEL                                            │
    │  Account entity used for authentication and the users CRUD API          │
    └─────────────────────────────────────────────────────────────────────────┘

    Fields:
        - id:          UUID primary key (generated in Python)
        - email:       Unique email address, the login key
        - username:    Display handle
        - password:    Argon2id/Bcrypt hash; never serialized outward
        - first_name:  Given name
        - last_name:   Family name
        - role:        admin | user | guest
        - active:      Inactive accounts cannot log in
        - created_at:  Creation timestamp (list ordering key)
        - updated_at:  Last modification timestamp

    Timestamps are set by the repositories rather than server defaults so
    both access modes produce the same values.
    """

    __tablename__ = "users"

    # Primary Key
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid
    )

    # Authentication Fields
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True
    )
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=""
    )

    # Profile
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=""
    )
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=""
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=""
    )

    # Account Status
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
