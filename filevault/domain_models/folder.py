# ==============================================================================
# FOLDER MODEL - Folder Tree
# ==============================================================================

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from filevault.domain_models.base import SQLBase, TimestampMixin

if TYPE_CHECKING:
    from filevault.domain_models.user import User
    from filevault.domain_models.file import File


class Folder(SQLBase, TimestampMixin):
    """
    Folder node in a user's tree.

    A folder without ``parent_id`` sits at the root of its owner's tree.
    Deleting a folder cascades to its subfolders and files.
    """

    __tablename__ = "folders"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("folders.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="folders",
    )
    files: Mapped[List["File"]] = relationship(
        "File",
        back_populates="folder",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name={self.name})>"
