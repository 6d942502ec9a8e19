"""
Comprehensive Database Search
=============================

- Analyzer: decides which categories a question should search
- Aggregator: queries the row store per category, with a broad fallback
- Categories: declarative table of tables, filters and prompt fields
"""

from .analyzer import QueryAnalysis, analyze_query
from .aggregator import AggregatedSearch, SearchResultSet, aggregate_search
from .categories import CATEGORIES, Category

__all__ = [
    "QueryAnalysis",
    "analyze_query",
    "AggregatedSearch",
    "SearchResultSet",
    "aggregate_search",
    "CATEGORIES",
    "Category",
]
