# ==============================================================================
# TABLE REGISTRY - Closed Set of Queryable Tables
# ==============================================================================
# Every generic record operation resolves its table through this module
# ==============================================================================

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Type, Union

from filevault.core.exceptions import InvalidTableError
from filevault.domain_models import File, FileVersion, Folder, Share, SQLBase, User


class Table(str, Enum):
    """
    The tables the record helpers accept.

    Members compare equal to their model name, so ``Table.USER == "User"``.
    """

    USER = "User"
    FOLDER = "Folder"
    FILE = "File"
    FILE_VERSION = "FileVersion"
    SHARE = "Share"

    @classmethod
    def names(cls) -> List[str]:
        """Valid table names, in declaration order."""
        return [member.value for member in cls]

    @classmethod
    def resolve(cls, name: Union["Table", str]) -> "Table":
        """
        Turn a table designator into a ``Table`` member.

        Args:
            name: A ``Table`` member or its exact model name

        Returns:
            Matching ``Table`` member

        Raises:
            InvalidTableError: If ``name`` is not a known table
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            try:
                return cls(name)
            except ValueError:
                pass
        raise InvalidTableError(name, cls.names())

    @property
    def model(self) -> Type[SQLBase]:
        """ORM model mapped to this table."""
        return TABLE_MODELS[self]


TableName = Union[Table, str]

TABLE_MODELS: Mapping[Table, Type[SQLBase]] = MappingProxyType({
    Table.USER: User,
    Table.FOLDER: Folder,
    Table.FILE: File,
    Table.FILE_VERSION: FileVersion,
    Table.SHARE: Share,
})
