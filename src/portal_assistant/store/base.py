"""
Row store contract shared by the Supabase client and the in-memory store.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple


@dataclass(frozen=True)
class CategoryQuery:
    """
    A filtered, capped lookup against one table.

    Rows match when any keyword is a case-insensitive substring of any
    text column, or any code column equals one of ``codes``. With neither
    keywords nor codes every row matches.
    """
    category: str
    table: str
    select: str = "*"
    text_columns: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    code_columns: Tuple[str, ...] = ()
    codes: Tuple[str, ...] = ()
    order_by: Optional[str] = None
    limit: int = 10

    @property
    def has_filter(self) -> bool:
        return bool(
            (self.text_columns and self.keywords) or (self.code_columns and self.codes)
        )


class RowStore(Protocol):
    def select(self, query: CategoryQuery) -> List[Dict[str, Any]]: ...
