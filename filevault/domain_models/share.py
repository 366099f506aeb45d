# ==============================================================================
# SHARE MODEL - Sharing Links and Grants
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from filevault.domain_models.base import CreatedAtMixin, SQLBase


class Share(SQLBase, CreatedAtMixin):
    """
    Grant of access to a file or a folder.

    Exactly one of ``file_id`` / ``folder_id`` is set. A share without
    ``shared_with_id`` is a public link resolved by ``token``.
    """

    __tablename__ = "shares"

    token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        index=True,
        nullable=False,
    )
    permission: Mapped[str] = mapped_column(
        String(16),
        default="read",
        nullable=False,
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    file_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("files.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )
    folder_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("folders.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )
    shared_by_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    shared_with_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Share(id={self.id}, permission={self.permission})>"
