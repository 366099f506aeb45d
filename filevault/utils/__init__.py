# ==============================================================================
# UTILS PACKAGE INITIALIZATION
# ==============================================================================

"""
Utilities Module
================

Helper functions and utilities:
- Pagination helpers
- ID generators
- Date/time utilities
"""

from filevault.utils.helpers import (
    calculate_offset,
    generate_uuid,
    paginate_results,
    paginate_window,
    sanitize_filename,
    utc_now,
)

__all__ = [
    "calculate_offset",
    "generate_uuid",
    "paginate_results",
    "paginate_window",
    "sanitize_filename",
    "utc_now",
]
