"""
Query Analyzer
==============

Classifies a free-text portal question into the categories worth searching,
using static keyword patterns. Pure: the result depends only on the message.

- Materials vocabulary → projects + item codes (also collects the tokens)
- CSI-code-like digit groups → projects + item codes
- Category keywords → the matching category flag
- Phrase patterns → a single intent, first match wins
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

# Keyword patterns (case-insensitive, word-bounded)
MATERIALS_PATTERN = re.compile(
    r"\b(upvc|cpvc|pvc|hdpe|gre|grp|ductile iron|cast iron|iron|stainless steel|steel|"
    r"copper|brass|aluminium|aluminum|concrete|cement|rebar|timber|wood|glass|"
    r"gypsum|insulation|asphalt|bitumen|pipe|pipes|fitting|fittings|valve|valves|"
    r"cable|cables|wire|tile|tiles|paint|membrane)\b",
    re.IGNORECASE,
)

KEYWORD_PATTERNS = {
    "project": re.compile(
        r"\b(projects?|divisions?|sections?|masterformat|csi)\b", re.IGNORECASE
    ),
    "item_code": re.compile(
        r"\b(item codes?|items?|codes?|sku|products?|erp)\b", re.IGNORECASE
    ),
    "user": re.compile(
        r"\b(users?|members?|engineers?|admins?|administrators?|accounts?|staff|team|roles?)\b",
        re.IGNORECASE,
    ),
    "status": re.compile(
        r"\b(status|pending|approved|rejected|approvals?|reviews?|reviewed|waiting|draft)\b",
        re.IGNORECASE,
    ),
    "manufacturer": re.compile(
        r"\b(manufacturers?|brands?|vendors?|suppliers?|makers?)\b", re.IGNORECASE
    ),
    "attribute": re.compile(
        r"\b(attributes?|properties|property|mandatory|standard values?|fields?)\b",
        re.IGNORECASE,
    ),
    "request": re.compile(
        r"\b(requests?|change requests?|modifications?|changes?)\b", re.IGNORECASE
    ),
    "price": re.compile(
        r"\b(prices?|pricing|costs?|rates?|expensive|cheap|cheapest|currency|aed|usd)\b",
        re.IGNORECASE,
    ),
    "date": re.compile(
        r"\b(today|yesterday|recent|recently|latest|newest|last (?:week|month|year)|"
        r"this (?:week|month|year)|created|dates?)\b",
        re.IGNORECASE,
    ),
}

# Two, four or six digits, optionally space separated: "03", "0330", "03 30 00"
CSI_CODE_PATTERN = re.compile(r"\b\d{2}(?:\s?\d{2}){0,2}\b")

STOP_WORDS = frozenset(
    ["the", "and", "for", "are", "with", "any", "all", "can", "you", "show", "find", "get", "list"]
)

# Priority order matters
INTENT_PATTERNS = (
    ("search", re.compile(r"\b(show|find|search|list|get|display|give me|look up|lookup|fetch)\b", re.IGNORECASE)),
    ("count", re.compile(r"\b(how many|count|number of|total)\b", re.IGNORECASE)),
    ("who", re.compile(r"\bwho\b", re.IGNORECASE)),
    ("when", re.compile(r"\bwhen\b", re.IGNORECASE)),
    ("why", re.compile(r"\bwhy\b", re.IGNORECASE)),
    ("compare", re.compile(r"\b(compare|comparison|versus|vs|difference|differences)\b", re.IGNORECASE)),
    ("status", re.compile(r"\b(status|pending|approved|rejected|progress)\b", re.IGNORECASE)),
)

MAX_KEYWORD_TERMS = 3


@dataclass(frozen=True)
class QueryAnalysis:
    """Search plan derived from a single user message."""
    original_query: str
    materials: Tuple[str, ...]
    csi_codes: Tuple[str, ...]
    search_terms: Tuple[str, ...]
    search_projects: bool
    search_item_codes: bool
    search_users: bool
    search_requests: bool
    search_manufacturers: bool
    search_attributes: bool
    search_reviews: bool
    search_status: bool
    mentions_price: bool
    mentions_date: bool
    intent: str
    complexity: str

    def keywords(self) -> List[str]:
        """Keywords matched against text columns: materials, else the first search terms."""
        if self.materials:
            return list(self.materials)
        return list(self.search_terms[:MAX_KEYWORD_TERMS])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalQuery": self.original_query,
            "materials": list(self.materials),
            "csiCodes": list(self.csi_codes),
            "searchTerms": list(self.search_terms),
            "searchProjects": self.search_projects,
            "searchItemCodes": self.search_item_codes,
            "searchUsers": self.search_users,
            "searchRequests": self.search_requests,
            "searchManufacturers": self.search_manufacturers,
            "searchAttributes": self.search_attributes,
            "searchReviews": self.search_reviews,
            "searchStatus": self.search_status,
            "mentionsPrice": self.mentions_price,
            "mentionsDate": self.mentions_date,
            "intent": self.intent,
            "complexity": self.complexity,
        }


def _distinct(tokens: List[str]) -> Tuple[str, ...]:
    seen = []
    for token in tokens:
        if token not in seen:
            seen.append(token)
    return tuple(seen)


def extract_search_terms(message_lower: str) -> Tuple[str, ...]:
    """Word tokens longer than two characters, minus stop words."""
    tokens = re.split(r"\W+", message_lower)
    return tuple(t for t in tokens if len(t) > 2 and t not in STOP_WORDS)


def detect_intent(message_lower: str) -> str:
    for intent, pattern in INTENT_PATTERNS:
        if pattern.search(message_lower):
            return intent
    return "general"


def analyze_query(message: str) -> QueryAnalysis:
    """
    Analyze a user message to decide which categories to search.

    Material keywords and CSI codes enable both projects and item codes,
    even when the message names neither category explicitly.

    Args:
        message: Raw user text

    Returns:
        QueryAnalysis for the message
    """
    message = message or ""
    message_lower = message.lower()

    matches = {name: bool(p.search(message_lower)) for name, p in KEYWORD_PATTERNS.items()}
    materials = _distinct([m.group(0) for m in MATERIALS_PATTERN.finditer(message_lower)])
    csi_codes = tuple(m.group(0) for m in CSI_CODE_PATTERN.finditer(message_lower))
    search_terms = extract_search_terms(message_lower)

    has_materials = bool(materials)
    has_codes = bool(csi_codes)

    return QueryAnalysis(
        original_query=message,
        materials=materials,
        csi_codes=csi_codes,
        search_terms=search_terms,
        search_projects=matches["project"] or has_materials or has_codes,
        search_item_codes=matches["item_code"] or matches["price"] or has_materials or has_codes,
        search_users=matches["user"],
        search_requests=matches["request"] or matches["status"],
        search_manufacturers=matches["manufacturer"],
        search_attributes=matches["attribute"],
        search_reviews=matches["status"],
        search_status=matches["status"],
        mentions_price=matches["price"],
        mentions_date=matches["date"],
        intent=detect_intent(message_lower),
        complexity="complex" if len(search_terms) > 3 else "simple",
    )
