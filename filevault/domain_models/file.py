# ==============================================================================
# FILE MODELS - File Metadata and Versions
# ==============================================================================
# Blob bytes live on disk; these rows only describe them
# ==============================================================================

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from filevault.domain_models.base import CreatedAtMixin, SQLBase, TimestampMixin

if TYPE_CHECKING:
    from filevault.domain_models.folder import Folder
    from filevault.domain_models.user import User


class File(SQLBase, TimestampMixin):
    """
    Metadata of an uploaded file.

    ``size`` and ``storage_path`` always describe the current version.
    ``is_deleted`` marks a soft-deleted file; its versions stay on disk
    until the row is removed.
    """

    __tablename__ = "files"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    mime_type: Mapped[str] = mapped_column(
        String(255),
        default="application/octet-stream",
        nullable=False,
    )
    size: Mapped[int] = mapped_column(
        BigInteger,
        default=0,
        nullable=False,
    )
    storage_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )
    current_version: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        index=True,
        nullable=False,
    )
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    folder_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("folders.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="files",
    )
    folder: Mapped[Optional["Folder"]] = relationship(
        "Folder",
        back_populates="files",
    )
    versions: Mapped[List["FileVersion"]] = relationship(
        "FileVersion",
        back_populates="file",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<File(id={self.id}, name={self.name}, version={self.current_version})>"


class FileVersion(SQLBase, CreatedAtMixin):
    """
    One stored revision of a file.

    ``(file_id, version)`` is unique.
    """

    __tablename__ = "file_versions"
    __table_args__ = (
        UniqueConstraint("file_id", "version", name="uq_file_versions_file_version"),
    )

    file_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("files.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )
    storage_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )

    file: Mapped["File"] = relationship(
        "File",
        back_populates="versions",
    )
