"""
Unit tests for the Supabase and in-memory row stores
"""

import http.client
import io
import json
import urllib.error
import urllib.parse
from unittest.mock import MagicMock, patch

import pytest

from portal_assistant.errors import RowStoreQueryFailed
from portal_assistant.search.aggregator import aggregate_search
from portal_assistant.search.analyzer import analyze_query
from portal_assistant.store.base import CategoryQuery
from portal_assistant.store.memory import InMemoryRowStore
from portal_assistant.store.supabase_client import SupabaseRowStore, build_or_filter


PROJECT_QUERY = CategoryQuery(
    category="projects",
    table="projects",
    select="*",
    text_columns=("name", "item_description"),
    keywords=("upvc", "stainless steel"),
    code_columns=("section_code",),
    codes=("03 30 00", "033000"),
    order_by="created_at",
    limit=15,
)


def _urlopen_response(payload: bytes):
    mock_response = MagicMock()
    mock_response.read.return_value = payload
    mock_response.__enter__ = lambda s: mock_response
    mock_response.__exit__ = MagicMock(return_value=False)
    return mock_response


class TestSupabaseRowStore:
    """Test cases for the PostgREST client."""

    def test_or_filter(self):
        assert build_or_filter(PROJECT_QUERY) == (
            '(name.ilike."*upvc*",item_description.ilike."*upvc*",'
            'name.ilike."*stainless steel*",item_description.ilike."*stainless steel*",'
            'section_code.in.("03 30 00","033000"))'
        )

    def test_build_url(self):
        store = SupabaseRowStore("https://portal.supabase.co/", "anon")

        url = store.build_url(PROJECT_QUERY)
        parsed = urllib.parse.urlparse(url)
        params = dict(urllib.parse.parse_qsl(parsed.query))

        assert parsed.netloc == "portal.supabase.co"
        assert parsed.path == "/rest/v1/projects"
        assert params["select"] == "*"
        assert params["or"] == build_or_filter(PROJECT_QUERY)
        assert params["order"] == "created_at.desc.nullslast"
        assert params["limit"] == "15"

    def test_unfiltered_query_has_no_or(self):
        store = SupabaseRowStore("https://portal.supabase.co", "anon")
        query = CategoryQuery(category="users", table="users", text_columns=("username",), limit=10)

        params = dict(urllib.parse.parse_qsl(urllib.parse.urlparse(store.build_url(query)).query))

        assert "or" not in params
        assert "order" not in params

    @patch('portal_assistant.store.supabase_client.urllib.request.urlopen')
    def test_select_returns_rows(self, mock_urlopen):
        rows = [{"id": 101, "name": "UPVC Distribution Upgrade"}]
        mock_urlopen.return_value = _urlopen_response(json.dumps(rows).encode())

        result = SupabaseRowStore("https://portal.supabase.co", "anon").select(PROJECT_QUERY)

        assert result == rows
        request = mock_urlopen.call_args[0][0]
        assert request.get_header("Apikey") == "anon"
        assert request.get_header("Authorization") == "Bearer anon"

    @patch('portal_assistant.store.supabase_client.urllib.request.urlopen')
    def test_http_error_raises(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.HTTPError(
            "https://portal.supabase.co/rest/v1/projects", 401, "Unauthorized", {},
            io.BytesIO(b'{"message":"Invalid API key"}'),
        )

        with pytest.raises(RowStoreQueryFailed) as exc_info:
            SupabaseRowStore("https://portal.supabase.co", "bad").select(PROJECT_QUERY)

        assert exc_info.value.status == 401
        assert exc_info.value.category == "projects"

    @patch('portal_assistant.store.supabase_client.urllib.request.urlopen')
    def test_network_error_raises(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("timed out")

        with pytest.raises(RowStoreQueryFailed):
            SupabaseRowStore("https://portal.supabase.co", "anon").select(PROJECT_QUERY)

    @patch('portal_assistant.store.supabase_client.urllib.request.urlopen')
    def test_unexpected_payload_raises(self, mock_urlopen):
        mock_urlopen.return_value = _urlopen_response(b'{"message": "not a list"}')

        with pytest.raises(RowStoreQueryFailed):
            SupabaseRowStore("https://portal.supabase.co", "anon").select(PROJECT_QUERY)

    @patch('portal_assistant.store.supabase_client.urllib.request.urlopen')
    def test_undecodable_body_raises(self, mock_urlopen):
        mock_urlopen.return_value = _urlopen_response(b"\xff\xfe not utf-8")

        with pytest.raises(RowStoreQueryFailed) as exc_info:
            SupabaseRowStore("https://portal.supabase.co", "anon").select(PROJECT_QUERY)

        assert exc_info.value.category == "projects"

    @patch('portal_assistant.store.supabase_client.urllib.request.urlopen')
    def test_truncated_body_raises(self, mock_urlopen):
        mock_response = _urlopen_response(b"")
        mock_response.read.side_effect = http.client.IncompleteRead(b'[{"id": 1', 200)
        mock_urlopen.return_value = mock_response

        with pytest.raises(RowStoreQueryFailed):
            SupabaseRowStore("https://portal.supabase.co", "anon").select(PROJECT_QUERY)

    def test_undecodable_body_becomes_search_error(self, portal_config):
        store = SupabaseRowStore(portal_config.supabase_url, portal_config.supabase_key)

        with patch('portal_assistant.store.supabase_client.urllib.request.urlopen') as mock_urlopen:
            mock_urlopen.return_value = _urlopen_response(b"\xff")
            result = aggregate_search(analyze_query("steel projects"), store)

        assert result.error
        assert result.results == {}


class TestInMemoryRowStore:
    """Test cases for the in-memory store."""

    def test_substring_and_code_matching(self):
        store = InMemoryRowStore({"projects": [
            {"id": 1, "name": "UPVC mains", "created_at": "2024-01-01"},
            {"id": 2, "name": "Roofing", "section_code": "033000", "created_at": "2024-03-01"},
            {"id": 3, "name": "Landscaping", "created_at": "2024-02-01"},
        ]})

        rows = store.select(PROJECT_QUERY)

        assert [r["id"] for r in rows] == [2, 1]

    def test_rows_without_order_column_sort_last(self):
        store = InMemoryRowStore({"projects": [
            {"id": 1, "name": "upvc a"},
            {"id": 2, "name": "upvc b", "created_at": "2024-03-01"},
        ]})

        assert [r["id"] for r in store.select(PROJECT_QUERY)] == [2, 1]

    def test_returned_rows_are_copies(self):
        store = InMemoryRowStore({"projects": [{"id": 1, "name": "upvc"}]})

        store.select(PROJECT_QUERY)[0]["name"] = "changed"

        assert store.select(PROJECT_QUERY)[0]["name"] == "upvc"
