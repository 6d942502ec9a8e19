"""
Unit tests for the prompt builders
"""

from portal_assistant.rag.prompt import (
    NO_RESULTS_SENTENCE,
    build_basic_prompt,
    build_diagnostic_prompt,
    build_search_prompt,
)
from portal_assistant.search.aggregator import aggregate_search
from portal_assistant.search.analyzer import analyze_query
from portal_assistant.search.categories import CATEGORIES
from portal_assistant.store.memory import InMemoryRowStore


FULL_TABLES = {
    "attribute_change_requests": [
        {
            "attribute_name": "Steel grade",
            "new_value": "S355",
            "reason": "Client upgrade",
            "status": "pending",
            "projects": {"name": "Steel Frame Warehouse"},
            "created_by": "a.rahman",
            "created_at": "2024-06-18T07:00:00Z",
        },
    ],
    "project_manufacturers": [
        {
            "name": "Emirates Steel",
            "projects": {"name": "Steel Frame Warehouse"},
            "added_by": "a.rahman",
            "added_at": "2024-06-17T07:00:00Z",
        },
    ],
    "project_attributes": [
        {
            "name": "Steel coating",
            "is_mandatory": True,
            "standard_values": ["galvanized", "painted"],
            "projects": {"name": "Steel Frame Warehouse"},
            "created_at": "2024-06-17T09:00:00Z",
        },
    ],
}


class TestSearchPrompt:
    """Test cases for build_search_prompt."""

    def test_upvc_project_block(self, sample_store):
        message = "find upvc pipe projects"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), sample_store))

        assert 'USER QUERY: "find upvc pipe projects"' in prompt
        assert "Tables searched: projects | Total results: 1" in prompt
        assert "📁 PROJECTS (1 found):" in prompt
        assert "1. Project ID: 101" in prompt
        assert "   Name: UPVC Distribution Upgrade" in prompt
        assert "   Division: 33 - Utilities" in prompt
        assert "ITEM CODES" not in prompt

    def test_every_rendered_field_value_is_verbatim(self, sample_store):
        sample_store.add_rows("attribute_change_requests", FULL_TABLES["attribute_change_requests"])
        sample_store.add_rows("project_manufacturers", FULL_TABLES["project_manufacturers"])
        sample_store.add_rows("project_attributes", FULL_TABLES["project_attributes"])
        message = "show steel status for manufacturers, attributes and users"
        aggregated = aggregate_search(analyze_query(message), sample_store)

        prompt = build_search_prompt(message, aggregated)

        assert aggregated.total_results > 0
        for category in CATEGORIES:
            result_set = aggregated.get(category.name)
            if not result_set:
                continue
            for row in result_set.results:
                for label, render in category.fields:
                    assert f"{label}: {render(row)}" in prompt

    def test_item_code_fields(self, sample_store):
        message = "steel item prices"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), sample_store))

        assert "🏷️ ITEM CODES (1 found):" in prompt
        assert "1. Code: STL-200-HR" in prompt
        assert "   Unit Price: 450.5 AED" in prompt
        assert "   ERP Integrated: Yes" in prompt
        assert "   Project: Steel Frame Warehouse" in prompt
        assert "- Include unit prices with their currency exactly as listed" in prompt

    def test_structured_values_rendered_as_json(self):
        store = InMemoryRowStore(FULL_TABLES)
        message = "steel attributes"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), store))

        assert '   Standard Values: ["galvanized", "painted"]' in prompt
        assert "   Mandatory: Yes" in prompt

    def test_blocks_follow_category_order(self, sample_store):
        message = "show pending steel reviews"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), sample_store))

        assert prompt.index("PROJECTS (") < prompt.index("ITEM CODES (") < prompt.index("PROJECT REVIEWS (")

    def test_no_results_sentence(self, empty_store):
        message = "find upvc pipe projects"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), empty_store))

        assert NO_RESULTS_SENTENCE in prompt
        assert "Total results: 0" in prompt
        assert "DATABASE RESULTS" not in prompt

    def test_closing_directives(self, sample_store):
        message = "find upvc pipe projects"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), sample_store))

        assert "- Use ONLY the database results listed above" in prompt
        assert "Never invent project IDs" in prompt
        assert "say clearly that nothing matched" in prompt
        assert prompt.endswith("Response:")

    def test_missing_values_marked(self):
        store = InMemoryRowStore({"projects": [{"id": 5, "name": "Bare steel shed"}]})
        message = "steel"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), store))

        assert "   Status: N/A" in prompt
        assert "   Division: N/A - N/A" in prompt

    def test_missing_flags_not_rendered_as_no(self):
        store = InMemoryRowStore({
            "item_codes": [
                {"code": "STL-300", "description_1": "Steel angle", "erp_integrated": False},
                {"code": "STL-400", "description_1": "Steel channel"},
            ],
            "project_attributes": [{"name": "Steel grade"}],
        })
        message = "steel item attributes"
        prompt = build_search_prompt(message, aggregate_search(analyze_query(message), store))

        assert "   ERP Integrated: No" in prompt
        assert "   ERP Integrated: N/A" in prompt
        assert "   Mandatory: N/A" in prompt
        assert "   Mandatory: No" not in prompt


class TestOtherPrompts:
    """Test cases for the basic and diagnostic prompts."""

    def test_basic_prompt_wraps_query(self):
        prompt = build_basic_prompt("What is a CSI division?")

        assert prompt.startswith("You are an intelligent AI assistant for a Code Generation Portal")
        assert prompt.endswith("What is a CSI division?")

    def test_diagnostic_prompt_mentions_mode(self):
        prompt = build_diagnostic_prompt("steel projects")

        assert 'USER QUERY: "steel projects"' in prompt
        assert "diagnostic mode" in prompt
