"""
Supabase Row Store
------------------
Category lookups against the portal database through Supabase's PostgREST
endpoint (``/rest/v1/<table>``).
"""

import http.client
import json
import logging
import urllib.request
import urllib.error
import urllib.parse
from typing import Any, Dict, List

from ..errors import RowStoreQueryFailed
from .base import CategoryQuery

# Setup logger (compatible with both local and Lambda)
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def _quote(value: str) -> str:
    """Double-quote a PostgREST filter value so spaces and commas survive."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_or_filter(query: CategoryQuery) -> str:
    """
    Build the PostgREST ``or`` expression for a category query.

    Example:
        (name.ilike."*upvc*",division_code.in.("03 30 00"))
    """
    conditions = []
    for keyword in query.keywords:
        for col in query.text_columns:
            conditions.append(f"{col}.ilike.{_quote(f'*{keyword}*')}")
    if query.codes:
        code_list = ",".join(_quote(code) for code in query.codes)
        for col in query.code_columns:
            conditions.append(f"{col}.in.({code_list})")
    return f"({','.join(conditions)})"


class SupabaseRowStore:
    """
    Read-only PostgREST client for the portal tables.

    Each ``select`` call is one HTTP GET; the response is the JSON array of
    matching rows.
    """

    def __init__(self, url: str, api_key: str, timeout: int = 30):
        self.base_url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def build_url(self, query: CategoryQuery) -> str:
        params = [("select", query.select)]
        if query.has_filter:
            params.append(("or", build_or_filter(query)))
        if query.order_by:
            params.append(("order", f"{query.order_by}.desc.nullslast"))
        params.append(("limit", str(query.limit)))
        return f"{self.base_url}/rest/v1/{query.table}?{urllib.parse.urlencode(params)}"

    def select(self, query: CategoryQuery) -> List[Dict[str, Any]]:
        """
        Run a category lookup.

        Args:
            query: Filter, ordering and cap for one category

        Returns:
            Matching rows, newest first where the table records creation time

        Raises:
            RowStoreQueryFailed: On HTTP, network or decoding failure
        """
        url = self.build_url(query)
        request = urllib.request.Request(
            url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
        )

        logger.info(f"Row store query: table={query.table}, keywords={list(query.keywords)}, codes={list(query.codes)}")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                payload = response.read()
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace")
            logger.error(f"Row store error: {e.code} - {error_body[:300]}")
            raise RowStoreQueryFailed(query.category, error_body[:300] or str(e), status=e.code)
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as e:
            logger.error(f"Row store connection error: {e}")
            raise RowStoreQueryFailed(query.category, str(e))

        try:
            rows = json.loads(payload.decode("utf-8"))
        except ValueError as e:
            raise RowStoreQueryFailed(query.category, f"invalid JSON response: {e}")

        if not isinstance(rows, list):
            raise RowStoreQueryFailed(query.category, "unexpected response shape")

        return rows
