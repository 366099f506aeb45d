# ==============================================================================
# DATABASE PACKAGE INITIALIZATION
# ==============================================================================
# Table-generic record access over SQLAlchemy async
# ==============================================================================

"""
Database Module
===============

Record access helpers shared by every service:
- SQLite (development/testing)
- PostgreSQL (production)

Key Components:
- Table: closed registry of queryable tables
- RecordStore: engine lifecycle and per-call sessions
- Transaction: operations sharing one transaction
- create_record_store: construction from settings
"""

from filevault.database.factory import create_record_store
from filevault.database.operations import BatchPayload, RecordOperations
from filevault.database.store import RecordStore, StoreState
from filevault.database.tables import Table, TableName
from filevault.database.unit_of_work import Transaction

__all__ = [
    "BatchPayload",
    "RecordOperations",
    "RecordStore",
    "StoreState",
    "Table",
    "TableName",
    "Transaction",
    "create_record_store",
]
