"""
Shared fixtures for the portal assistant tests.
"""

import os
import sys

import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from portal_assistant.config import PortalConfig  # noqa: E402
from portal_assistant.store.memory import InMemoryRowStore  # noqa: E402


SAMPLE_TABLES = {
    "projects": [
        {
            "id": 101,
            "name": "UPVC Distribution Upgrade",
            "division_code": "33",
            "division_description": "Utilities",
            "section_code": "33 10 00",
            "section_description": "Water Utilities",
            "detailed_section_code": "33 11 13",
            "detailed_section_description": "Public Water Supply Wells",
            "item_code": "UPVC-110",
            "item_description": "UPVC pressure pipe 110mm",
            "status": "active",
            "created_at": "2024-05-02T10:00:00Z",
            "created_by": "m.khan",
        },
        {
            "id": 102,
            "name": "Steel Frame Warehouse",
            "division_code": "05",
            "division_description": "Metals",
            "section_code": "05 12 00",
            "section_description": "Structural Steel Framing",
            "detailed_section_code": "05 12 23",
            "detailed_section_description": "Structural Steel for Buildings",
            "item_code": "STL-200",
            "item_description": "Hot rolled steel beam",
            "status": "pending",
            "created_at": "2024-06-15T08:30:00Z",
            "created_by": "a.rahman",
        },
    ],
    "item_codes": [
        {
            "code": "STL-200-HR",
            "description_1": "Hot rolled steel beam",
            "description_2": "IPE 200",
            "unit_price": 450.5,
            "currency": "AED",
            "manufacturer": "Emirates Steel",
            "unit_of_measure": "m",
            "status": "approved",
            "erp_integrated": True,
            "projects": {"name": "Steel Frame Warehouse"},
            "created_by": "a.rahman",
            "created_at": "2024-06-20T09:00:00Z",
        },
    ],
    "users": [
        {
            "id": 1,
            "username": "m.khan",
            "email": "m.khan@example.com",
            "role": "engineer",
            "status": "active",
            "created_at": "2024-01-10T12:00:00Z",
        },
    ],
    "project_reviews": [
        {
            "action": "pending",
            "comments": "Steel frame awaiting approvals from design lead",
            "projects": {"name": "Steel Frame Warehouse"},
            "reviewer": "s.lee",
            "created_at": "2024-06-16T11:00:00Z",
        },
    ],
}


@pytest.fixture
def sample_store():
    return InMemoryRowStore(SAMPLE_TABLES)


@pytest.fixture
def empty_store():
    return InMemoryRowStore()


@pytest.fixture
def portal_config():
    return PortalConfig.from_env({
        "ANTHROPIC_API_KEY": "sk-ant-REDACTED",
        "SUPABASE_URL": "https://portal.supabase.co",
        "SUPABASE_ANON_KEY": "anon-key",
    })
