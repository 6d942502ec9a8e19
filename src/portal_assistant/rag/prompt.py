"""
Prompt builders for the portal assistant.

The database prompt enumerates every retrieved row field by field and
closes with directives restricting the model to that data.
"""

from typing import List

from ..search.aggregator import AggregatedSearch
from ..search.categories import CATEGORIES, Category

ASSISTANT_ROLE = "You are an intelligent AI assistant for a Code Generation Portal"

DIAGNOSTIC_PROBE = 'Hello, are you working? Please respond with "Yes, I am working."'

NO_RESULTS_SENTENCE = "No matching records were found in the database for this query."


def build_basic_prompt(prompt: str) -> str:
    return f"""{ASSISTANT_ROLE}. Please provide a helpful response to this user query:

{prompt}"""


def build_diagnostic_prompt(prompt: str) -> str:
    return f"""{ASSISTANT_ROLE}.

USER QUERY: "{prompt}"

IMPORTANT: You are currently running in diagnostic mode. The comprehensive database integration is being set up.

For now, provide helpful responses and acknowledge when users ask about specific database content. Suggest they use the portal's built-in search features while full AI database integration is being configured.

Provide professional, helpful guidance based on the user's query."""


def _render_category(category: Category, rows: List[dict]) -> List[str]:
    lines = [f"{category.icon} {category.label} ({len(rows)} found):"]
    for i, row in enumerate(rows, 1):
        first_label, first_render = category.fields[0]
        lines.append(f"{i}. {first_label}: {first_render(row)}")
        for label, render in category.fields[1:]:
            lines.append(f"   {label}: {render(row)}")
    lines.append("")
    return lines


def build_search_prompt(user_message: str, aggregated: AggregatedSearch) -> str:
    """
    Build the completion prompt for a database-enriched question.

    Args:
        user_message: The user's question
        aggregated: Search results for the question

    Returns:
        Prompt text with the retrieved rows and response directives
    """
    analysis = aggregated.query_analysis
    tables = ", ".join(aggregated.tables_searched) or "none"

    parts = [
        f"{ASSISTANT_ROLE} with direct access to the portal database "
        "(projects, item codes, users, attribute change requests, manufacturers, "
        "project attributes and project reviews).",
        "",
        f'USER QUERY: "{user_message}"',
        "",
        f"SEARCH SUMMARY: Tables searched: {tables} | Total results: {aggregated.total_results}",
        f"Query intent: {analysis.intent} | Complexity: {analysis.complexity}",
    ]
    if aggregated.fallback_used:
        parts.append("Note: no direct matches were found, so a broad search of projects and item codes was used.")
    parts.append("")

    if aggregated.total_results == 0:
        parts.extend([NO_RESULTS_SENTENCE, ""])
    else:
        parts.append("DATABASE RESULTS:")
        parts.append("=" * 40)
        parts.append("")
        for category in CATEGORIES:
            result_set = aggregated.get(category.name)
            if result_set and result_set.results:
                parts.extend(_render_category(category, result_set.results))

    parts.extend([
        "=" * 40,
        "Instructions for Response:",
        "- Use ONLY the database results listed above",
        "- Never invent project IDs, item codes, names, prices or any other values",
        "- If no records were found, say clearly that nothing matched in the database",
        "- Reference records by their exact names and codes",
        "- Structure the answer with headings and bullet points, using emojis "
        "(📁 projects, 🏷️ item codes, 👤 users, ✅ reviews) to mark sections",
    ])
    if analysis.mentions_price:
        parts.append("- Include unit prices with their currency exactly as listed")
    if analysis.mentions_date:
        parts.append("- Include the creation dates exactly as listed")
    if analysis.intent == "count":
        parts.append("- State the number of matching records for each table")
    parts.extend(["", "Response:"])

    return "\n".join(parts)
