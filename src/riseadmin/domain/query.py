from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SortOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class OrderBy:
    column: str
    order: SortOrder = SortOrder.ASC
    nulls_first: Optional[bool] = None


@dataclass
class RowQuery:
    """Row query object - Fluent API for select conditions"""

    columns: List[str] = field(default_factory=list)
    filters: Dict[str, Any] = field(default_factory=dict)
    ordering: List[OrderBy] = field(default_factory=list)
    limit: Optional[int] = None
    offset: int = 0

    def select(self, *columns: str):
        self.columns = list(columns)
        return self

    def eq(self, column: str, value: Any):
        self.filters[column] = value
        return self

    def order_by(self, column: str, *, ascending: bool = True, nulls_first: Optional[bool] = None):
        """Append an ordering term.

        ``nulls_first=None`` keeps the backend default, which for ascending
        order in SQLite places NULLs first.
        """
        order = SortOrder.ASC if ascending else SortOrder.DESC
        self.ordering.append(OrderBy(column, order, nulls_first))
        return self

    def paginate(self, page: int, page_size: int):
        self.offset = (page - 1) * page_size
        self.limit = page_size
        return self
