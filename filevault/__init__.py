# ==============================================================================
# FILEVAULT PACKAGE INITIALIZATION
# ==============================================================================
# File storage backend with FastAPI
# Supports: SQLite, PostgreSQL
# ==============================================================================

"""
FileVault Backend
=================

A FastAPI file-storage backend built on a table-generic record access
layer over SQLAlchemy async.

Features:
---------
- Record access helpers: CRUD, pagination, transactions, raw SQL
- JWT-based authentication
- Folder tree, versioned file uploads and share links
- Request logging and uniform JSON error responses

Usage:
------
    from filevault.main import app

    # Run with uvicorn
    uvicorn filevault.main:app --reload
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
