# ==============================================================================
# STORAGE PACKAGE INITIALIZATION
# ==============================================================================

"""
Blob storage for uploaded file contents.
"""

from filevault.storage.blobs import LocalBlobStore, StoredBlob

__all__ = [
    "LocalBlobStore",
    "StoredBlob",
]
