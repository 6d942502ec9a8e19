"""
In-memory row store with the same filter semantics as the PostgREST client.
Used for local runs without a database and in tests.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping

from .base import CategoryQuery


class InMemoryRowStore:
    """Tables held as lists of row dicts, keyed by table name."""

    def __init__(self, tables: Mapping[str, Iterable[Dict[str, Any]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.queries: List[CategoryQuery] = []

    def add_rows(self, table: str, rows: Iterable[Dict[str, Any]]) -> None:
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    @staticmethod
    def _matches(row: Dict[str, Any], query: CategoryQuery) -> bool:
        if not query.has_filter:
            return True
        for keyword in query.keywords:
            needle = keyword.lower()
            for col in query.text_columns:
                value = row.get(col)
                if value is not None and needle in str(value).lower():
                    return True
        codes = set(query.codes)
        for col in query.code_columns:
            if row.get(col) is not None and str(row[col]) in codes:
                return True
        return False

    def select(self, query: CategoryQuery) -> List[Dict[str, Any]]:
        self.queries.append(query)
        rows = [row for row in self.tables.get(query.table, []) if self._matches(row, query)]
        if query.order_by:
            # Rows lacking the order column sort last, like NULLS LAST
            dated = [r for r in rows if r.get(query.order_by) is not None]
            undated = [r for r in rows if r.get(query.order_by) is None]
            dated.sort(key=lambda r: str(r[query.order_by]), reverse=True)
            rows = dated + undated
        return copy.deepcopy(rows[:query.limit])
