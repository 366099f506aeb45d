# ==============================================================================
# USER MODEL - Account and Quota
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from filevault.domain_models.base import SQLBase, TimestampMixin

if TYPE_CHECKING:
    from filevault.domain_models.folder import Folder
    from filevault.domain_models.file import File


class User(SQLBase, TimestampMixin):
    """
    Account owning folders, files and shares.

    Attributes:
        email: Unique email address (login identifier)
        name: Display name
        hashed_password: Bcrypt-hashed password
        storage_quota: Bytes the user may store
        storage_used: Bytes currently stored, across all file versions
        last_login: Time of the last successful login
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    storage_quota: Mapped[int] = mapped_column(
        BigInteger,
        default=10_000_000_000,
        nullable=False,
    )
    storage_used: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    folders: Mapped[List["Folder"]] = relationship(
        "Folder",
        back_populates="owner",
        passive_deletes=True,
    )
    files: Mapped[List["File"]] = relationship(
        "File",
        back_populates="owner",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
