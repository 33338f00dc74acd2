"""
Shared test fixtures.

Provides an in-memory Supabase mock, API test clients and sample rows.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require these before any config import
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator
from uuid import uuid4

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error
        self._is_single = False

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        now = datetime.utcnow().isoformat() + "Z"
        rows = []
        for item in data:
            row = dict(item)
            row.setdefault("id", "test-uuid-123")
            row["created_at"] = now
            row["updated_at"] = now
            rows.append(row)
        self._data = rows
        return self

    def upsert(self, data):
        # Simulate upsert - keep created_at of an existing row with the same id
        if isinstance(data, dict):
            data = [data]
        now = datetime.utcnow().isoformat() + "Z"
        existing = {row.get("id"): row for row in self._data}
        rows = []
        for item in data:
            row = dict(item)
            row.setdefault("id", str(uuid4()))
            previous = existing.get(row["id"])
            row["created_at"] = previous.get("created_at", now) if previous else now
            row["updated_at"] = now
            rows.append(row)
        self._data = rows
        return self

    def update(self, data):
        # Simulate update - merge with existing data
        updated_data = []
        for item in self._data:
            merged = {**item, **data}
            merged["updated_at"] = datetime.utcnow().isoformat() + "Z"
            updated_data.append(merged)
        self._data = updated_data if updated_data else [data]
        return self

    def delete(self):
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def neq(self, column, value):
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        if self._is_single:
            # Return first item or empty for single()
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(
                data=data,
                count=1 if data else 0
            )
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(list(self._data), self._count, self._error)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)

    def upsert(self, data):
        return self._query().upsert(data)

    def update(self, data):
        # For update, pass the existing data so it can be merged
        return self._query().update(data)

    def delete(self):
        return self._query()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query against a table raise error."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None, "error": None})
        return MockSupabaseTable(config["data"], config["count"], config["error"])


SERVICE_MODULES = (
    "services.mapping_config_service",
    "services.source_item_service",
    "services.target_item_service",
)


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset the singleton services between tests."""
    import services.mapping_config_service as mapping_config_module
    import services.source_item_service as source_item_module
    import services.target_item_service as target_item_module
    import services.reconciliation_service as reconciliation_module

    def reset():
        mapping_config_module._mapping_config_service = None
        source_item_module._source_item_service = None
        target_item_module._target_item_service = None
        reconciliation_module._reconciliation_service = None

    reset()
    yield
    reset()


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("hierarchy_mappings", [
                {"id": "1", "name": "Default Mapping", ...}
            ])
    """
    return MockSupabaseClient()


def _patch_clients(mock_supabase):
    patches = [patch("config.database.get_supabase_client", return_value=mock_supabase)]
    patches += [
        patch(f"{module}.get_supabase_client", return_value=mock_supabase)
        for module in SERVICE_MODULES
    ]
    return patches


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("ado_work_items", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    patches = _patch_clients(mock_supabase)
    for p in patches:
        p.start()
    try:
        yield mock_supabase
    finally:
        for p in reversed(patches):
            p.stop()


@pytest.fixture
def sample_config_row() -> dict:
    """Sample stored mapping configuration row."""
    return {
        "id": "config-1",
        "name": "Healthcare Mapping",
        "description": "Mapping for the healthcare business unit",
        "workspace_id": None,
        "pb_to_ado_mappings": [
            {"pb_level": "initiative", "ado_type": "Epic"},
            {"pb_level": "feature", "ado_type": "Feature"},
            {"pb_level": "subfeature", "ado_type": "User Story"},
        ],
        "area_path_mappings": [
            {
                "business_unit": "Healthcare",
                "product_code": "",
                "team": "",
                "area_path": "Healthcare",
            },
            {
                "business_unit": "Healthcare",
                "product_code": "Claims",
                "team": "",
                "area_path": "Healthcare\\Claims",
            },
        ],
        "initiative_epic_mappings": [],
        "user_team_mappings": [],
        "component_product_mappings": [],
        "created_at": "2025-12-05T10:00:00Z",
        "updated_at": "2025-12-05T10:00:00Z",
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("hierarchy_mappings", [...])
            response = test_client_with_mock_db.get("/api/mapping-configs")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
