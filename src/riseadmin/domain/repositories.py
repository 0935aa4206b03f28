from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from .query import RowQuery

Row = Dict[str, Any]


class IRowStore(ABC):
    """Table-oriented store used by the admin screens."""

    @abstractmethod
    def select(self, table: str, query: RowQuery) -> List[Row]:
        """Return rows of *table* matching *query*"""
        pass

    @abstractmethod
    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        """Insert one row and return it as stored (including generated keys)"""
        pass

    @abstractmethod
    def update(self, table: str, values: Mapping[str, Any], eq: Mapping[str, Any]) -> int:
        """Update rows matching all *eq* filters; return the affected count"""
        pass

    @abstractmethod
    def delete(self, table: str, eq: Mapping[str, Any]) -> int:
        """Delete rows matching all *eq* filters; return the affected count"""
        pass
