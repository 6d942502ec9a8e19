"""
Search Categories
=================

Declarative table of the searchable row-store subject areas. Each entry
names the analyzer flag that enables it, how it is queried (table, text
columns, code columns, ordering, cap) and the field template used when
its rows are rendered into the prompt.

The order of CATEGORIES is the order categories are searched and the
order their blocks appear in the prompt.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

Row = Dict[str, Any]
FieldRenderer = Callable[[Row], str]

MISSING = "N/A"


def _text(value: Any) -> str:
    if value is None or value == "":
        return MISSING
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def column(name: str) -> FieldRenderer:
    """Render a single column verbatim."""
    return lambda row: _text(row.get(name))


def flag(name: str) -> FieldRenderer:
    """Render a boolean column as Yes/No, or N/A when the row has no value."""
    def render(row: Row) -> str:
        value = row.get(name)
        if value is None:
            return MISSING
        return "Yes" if value else "No"
    return render


def code_with_description(code: str, description: str) -> FieldRenderer:
    """Render "<code> - <description>"."""
    return lambda row: f"{_text(row.get(code))} - {_text(row.get(description))}"


def price(amount: str, currency: str) -> FieldRenderer:
    """Render "<amount> <currency>"."""
    def render(row: Row) -> str:
        if row.get(amount) is None:
            return MISSING
        if row.get(currency):
            return f"{row[amount]} {row[currency]}"
        return str(row[amount])
    return render


def parent_project(row: Row) -> str:
    """Name of the parent project from the embedded ``projects(name)`` resource."""
    project = row.get("projects")
    if isinstance(project, dict):
        return _text(project.get("name"))
    return _text(row.get("project_name"))


@dataclass(frozen=True)
class Category:
    """A searchable row-store category."""
    name: str
    label: str
    icon: str
    table: str
    flag: str                              # QueryAnalysis attribute enabling it
    select: str
    text_columns: Tuple[str, ...]
    fields: Tuple[Tuple[str, FieldRenderer], ...]
    limit: int = 10
    order_by: Optional[str] = "created_at"
    code_columns: Tuple[str, ...] = ()     # exact CSI-code membership


PROJECTS = Category(
    name="projects",
    label="PROJECTS",
    icon="📁",
    table="projects",
    flag="search_projects",
    select="*",
    text_columns=(
        "name",
        "division_description",
        "section_description",
        "detailed_section_description",
        "item_description",
    ),
    code_columns=("division_code", "section_code", "detailed_section_code"),
    limit=15,
    fields=(
        ("Project ID", column("id")),
        ("Name", column("name")),
        ("Division", code_with_description("division_code", "division_description")),
        ("Section", code_with_description("section_code", "section_description")),
        ("Detailed Section", code_with_description("detailed_section_code", "detailed_section_description")),
        ("Item", code_with_description("item_code", "item_description")),
        ("Status", column("status")),
        ("Created", column("created_at")),
        ("Created By", column("created_by")),
    ),
)

ITEM_CODES = Category(
    name="item_codes",
    label="ITEM CODES",
    icon="🏷️",
    table="item_codes",
    flag="search_item_codes",
    select="*, projects(name)",
    text_columns=("code", "description_1", "description_2", "manufacturer"),
    limit=15,
    fields=(
        ("Code", column("code")),
        ("Description", column("description_1")),
        ("Description 2", column("description_2")),
        ("Unit Price", price("unit_price", "currency")),
        ("Manufacturer", column("manufacturer")),
        ("Unit of Measure", column("unit_of_measure")),
        ("Status", column("status")),
        ("ERP Integrated", flag("erp_integrated")),
        ("Project", parent_project),
        ("Created By", column("created_by")),
        ("Created", column("created_at")),
    ),
)

USERS = Category(
    name="users",
    label="USERS",
    icon="👤",
    table="users",
    flag="search_users",
    select="id, username, email, role, status, created_at",
    text_columns=("username", "email", "role"),
    fields=(
        ("Username", column("username")),
        ("Email", column("email")),
        ("Role", column("role")),
        ("Status", column("status")),
        ("Created", column("created_at")),
    ),
)

REQUESTS = Category(
    name="requests",
    label="ATTRIBUTE CHANGE REQUESTS",
    icon="📝",
    table="attribute_change_requests",
    flag="search_requests",
    select="*, projects(name)",
    text_columns=("attribute_name", "new_value", "reason"),
    fields=(
        ("Attribute", column("attribute_name")),
        ("New Value", column("new_value")),
        ("Reason", column("reason")),
        ("Status", column("status")),
        ("Project", parent_project),
        ("Requested By", column("created_by")),
        ("Created", column("created_at")),
    ),
)

MANUFACTURERS = Category(
    name="manufacturers",
    label="MANUFACTURERS",
    icon="🏭",
    table="project_manufacturers",
    flag="search_manufacturers",
    select="*, projects(name)",
    text_columns=("name",),
    order_by="added_at",
    fields=(
        ("Name", column("name")),
        ("Project", parent_project),
        ("Added By", column("added_by")),
        ("Added", column("added_at")),
    ),
)

ATTRIBUTES = Category(
    name="attributes",
    label="PROJECT ATTRIBUTES",
    icon="🔧",
    table="project_attributes",
    flag="search_attributes",
    select="*, projects(name)",
    text_columns=("name",),
    fields=(
        ("Name", column("name")),
        ("Mandatory", flag("is_mandatory")),
        ("Standard Values", column("standard_values")),
        ("Project", parent_project),
        ("Created", column("created_at")),
    ),
)

REVIEWS = Category(
    name="reviews",
    label="PROJECT REVIEWS",
    icon="✅",
    table="project_reviews",
    flag="search_reviews",
    select="*, projects(name)",
    text_columns=("action", "comments"),
    fields=(
        ("Action", column("action")),
        ("Comments", column("comments")),
        ("Project", parent_project),
        ("Reviewer", column("reviewer")),
        ("Created", column("created_at")),
    ),
)

CATEGORIES = (
    PROJECTS,
    ITEM_CODES,
    USERS,
    REQUESTS,
    MANUFACTURERS,
    ATTRIBUTES,
    REVIEWS,
)

# Categories re-run by the broad search when nothing matched
FALLBACK_CATEGORIES = (PROJECTS, ITEM_CODES)

CATEGORIES_BY_NAME = {category.name: category for category in CATEGORIES}
