"""
Search Aggregator
=================

Runs one filtered lookup per enabled category and collects the non-empty
results in category order. When nothing matched, a single broad pass over
projects and item codes is made before giving up.

A row-store failure aborts the whole aggregation: the returned
AggregatedSearch carries the error and no rows.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..errors import RowStoreQueryFailed
from ..store.base import CategoryQuery, RowStore
from .analyzer import QueryAnalysis
from .categories import CATEGORIES, FALLBACK_CATEGORIES, Category

# Setup logger (compatible with both local and Lambda)
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


@dataclass
class SearchResultSet:
    """Rows returned for one category."""
    category: str
    results: List[Dict[str, Any]]
    search_type: str

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": self.results,
            "searchType": self.search_type,
            "total": self.total,
        }


@dataclass
class AggregatedSearch:
    """All category results gathered for one request."""
    search_query: str
    query_analysis: QueryAnalysis
    results: Dict[str, SearchResultSet] = field(default_factory=dict)
    fallback_used: bool = False
    error: Optional[str] = None

    @property
    def tables_searched(self) -> List[str]:
        return list(self.results.keys())

    @property
    def total_results(self) -> int:
        return sum(result_set.total for result_set in self.results.values())

    def get(self, category: str) -> Optional[SearchResultSet]:
        return self.results.get(category)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "tablesSearched": self.tables_searched,
            "totalResults": self.total_results,
            "searchQuery": self.search_query,
            "queryAnalysis": self.query_analysis.to_dict(),
            "fallbackUsed": self.fallback_used,
        }
        for name, result_set in self.results.items():
            data[name] = result_set.to_dict()
        if self.error:
            data["error"] = self.error
        return data


def _code_variants(codes: Sequence[str]) -> List[str]:
    """CSI codes as typed plus their space-free form, de-duplicated."""
    variants = []
    for code in codes:
        for variant in (code, "".join(code.split())):
            if variant not in variants:
                variants.append(variant)
    return variants


def _search_type(analysis: QueryAnalysis, category: Category) -> str:
    if analysis.materials:
        return "materials"
    if category.code_columns and analysis.csi_codes:
        return "csi_codes"
    if analysis.search_terms:
        return "keywords"
    return "recent"


def build_category_query(category: Category, analysis: QueryAnalysis) -> CategoryQuery:
    """
    Translate the analysis into a filtered lookup for one category.

    Keywords are matched as substrings against the category's text columns;
    CSI codes only apply where the category declares code columns.
    """
    codes = _code_variants(analysis.csi_codes) if category.code_columns else []
    return CategoryQuery(
        category=category.name,
        table=category.table,
        select=category.select,
        text_columns=category.text_columns,
        keywords=tuple(analysis.keywords()),
        code_columns=category.code_columns,
        codes=tuple(codes),
        order_by=category.order_by,
        limit=category.limit,
    )


def enabled_categories(analysis: QueryAnalysis) -> List[Category]:
    return [category for category in CATEGORIES if getattr(analysis, category.flag)]


def _run_queries(
    categories: Sequence[Category],
    analysis: QueryAnalysis,
    store: RowStore,
    parallel: bool
) -> List[List[Dict[str, Any]]]:
    queries = [build_category_query(category, analysis) for category in categories]
    if parallel and len(queries) > 1:
        with ThreadPoolExecutor(max_workers=len(queries)) as executor:
            futures = [executor.submit(store.select, query) for query in queries]
            # Joined in category order so the first failing category is reported
            return [future.result() for future in futures]
    return [store.select(query) for query in queries]


def aggregate_search(
    analysis: QueryAnalysis,
    store: RowStore,
    parallel: bool = False
) -> AggregatedSearch:
    """
    Search every category the analysis enabled and aggregate the results.

    Args:
        analysis: Output of analyze_query
        store: Row store to query
        parallel: Issue the category lookups concurrently

    Returns:
        AggregatedSearch with non-empty categories in fixed order, or with
        ``error`` set if the row store failed
    """
    aggregated = AggregatedSearch(
        search_query=analysis.original_query,
        query_analysis=analysis,
    )
    categories = enabled_categories(analysis)

    logger.info(f"Searching categories: {[c.name for c in categories]}")

    try:
        for category, rows in zip(categories, _run_queries(categories, analysis, store, parallel)):
            if rows:
                aggregated.results[category.name] = SearchResultSet(
                    category=category.name,
                    results=rows,
                    search_type=_search_type(analysis, category),
                )

        if aggregated.total_results == 0:
            logger.info("No results from enabled categories, running broad search")
            aggregated.fallback_used = True
            fallback_rows = _run_queries(FALLBACK_CATEGORIES, analysis, store, parallel)
            for category, rows in zip(FALLBACK_CATEGORIES, fallback_rows):
                if rows:
                    aggregated.results[category.name] = SearchResultSet(
                        category=category.name,
                        results=rows,
                        search_type="fallback",
                    )

    except RowStoreQueryFailed as e:
        logger.error(f"Search aborted: {e}")
        aggregated.results = {}
        aggregated.error = str(e)
        return aggregated

    logger.info(
        f"Search complete: tables={aggregated.tables_searched}, "
        f"total={aggregated.total_results}, fallback={aggregated.fallback_used}"
    )
    return aggregated
