# ==============================================================================
# DATABASE FACTORY - RecordStore Construction from Settings
# ==============================================================================

from __future__ import annotations

import logging
from typing import Optional

from filevault.core.settings import Settings, get_settings
from filevault.database.store import RecordStore

logger = logging.getLogger(__name__)


def create_record_store(app_settings: Optional[Settings] = None) -> RecordStore:
    """
    Build a RecordStore configured from application settings.

    The store is not opened here; it connects on first use.

    Args:
        app_settings: Settings to use (defaults to the cached settings)

    Returns:
        Unopened RecordStore

    Example:
        >>> store = create_record_store()
        >>> await store.create_tables()
    """
    cfg = app_settings or get_settings()
    logger.debug(f"Creating record store for {cfg.database_url.split('://', 1)[0]}")
    return RecordStore(
        cfg.database_url,
        echo=cfg.DB_ECHO,
        pool_size=cfg.DB_POOL_SIZE,
        max_overflow=cfg.DB_MAX_OVERFLOW,
        pool_timeout=cfg.DB_POOL_TIMEOUT,
        pool_recycle=cfg.DB_POOL_RECYCLE,
    )
