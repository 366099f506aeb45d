# ==============================================================================
# UNIT OF WORK PACKAGE INITIALIZATION
# ==============================================================================

"""
Unit of Work Pattern Implementation
===================================

- Transaction: record operations sharing one database transaction
"""

from filevault.database.unit_of_work.uow import Transaction

__all__ = [
    "Transaction",
]
