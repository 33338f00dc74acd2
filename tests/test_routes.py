"""
API tests for mapping configuration and reconciliation routes.

Run: pytest tests/test_routes.py -v
"""

import pytest

from tests.factories import MappingConfigFactory, SourceItemFactory, TargetItemFactory

CONFIG_TABLE = "hierarchy_mappings"
SOURCE_TABLE = "productboard_features"
TARGET_TABLE = "ado_work_items"


@pytest.fixture
def seeded(test_client_with_mock_db, mock_supabase):
    """An initiative with a correct epic and a feature filed in the wrong place."""
    mock_supabase.set_table_data(CONFIG_TABLE, [
        MappingConfigFactory.row(
            id="config-1",
            name="Compliance Mapping",
            location_rules=[{"business_unit": "Compliance", "area_path": "Compliance"}],
        ),
    ])
    mock_supabase.set_table_data(SOURCE_TABLE, [
        SourceItemFactory.row(id="i1", name="Audit", level="initiative", business_unit="Compliance"),
        SourceItemFactory.row(id="f1", name="Evidence upload", level="feature", parent_id="i1",
                              business_unit="Compliance"),
    ])
    mock_supabase.set_table_data(TARGET_TABLE, [
        TargetItemFactory.row(id=1, title="Audit", type="Epic", area_path="Compliance", productboard_id="i1"),
        TargetItemFactory.row(id=2, title="Evidence upload", type="Feature", parent_id=1,
                              area_path="Claims", productboard_id="f1"),
    ])
    return test_client_with_mock_db


class TestHealthEndpoints:
    """Tests for / and /health."""

    def test_root(self, test_client):
        """Should list the API endpoints."""
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["reconciliation"] == "/api/reconciliation"

    def test_health(self, test_client_with_mock_db, mock_supabase):
        """Should report database status."""
        mock_supabase.set_table_data(CONFIG_TABLE, [MappingConfigFactory.row()])

        response = test_client_with_mock_db.get("/health")

        assert response.status_code == 200
        assert response.json()["database"]["mapping_configs_count"] == 1

    def test_structlog_routes_through_stdlib(self, test_client):
        """Should configure structlog on the stdlib logger factory."""
        import structlog

        config = structlog.get_config()

        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger


class TestMappingConfigRoutes:
    """Tests for /api/mapping-configs."""

    def test_list(self, seeded):
        """Should list stored configurations under their storage keys."""
        # Act
        response = seeded.get("/api/mapping-configs")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["data"][0]["area_path_mappings"][0]["area_path"] == "Compliance"

    def test_get_by_id(self, seeded):
        """Should return one configuration."""
        response = seeded.get("/api/mapping-configs/config-1")

        assert response.status_code == 200
        assert response.json()["name"] == "Compliance Mapping"

    def test_get_missing(self, seeded):
        """Should return 404 in the error envelope."""
        response = seeded.get("/api/mapping-configs/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "MAPPING_CONFIG_NOT_FOUND"

    def test_get_default(self, test_client_with_mock_db):
        """Should return the built-in default configuration."""
        response = test_client_with_mock_db.get("/api/mapping-configs/default")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Default Mapping"
        assert len(body["pb_to_ado_mappings"]) == 3

    def test_put_saves(self, test_client_with_mock_db):
        """Should upsert a configuration and return it."""
        # Act
        response = test_client_with_mock_db.put("/api/mapping-configs", json={
            "name": "Edited",
            "pb_to_ado_mappings": [{"pb_level": "feature", "ado_type": "Feature"}],
            "area_path_mappings": [{"mapping_type": "feature", "ado_product": "Claims",
                                    "area_path": "Healthcare\\Claims"}],
        })

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["id"]
        assert body["area_path_mappings"][0]["mapping_type"] == "feature"

    def test_put_invalid(self, test_client_with_mock_db):
        """Should return 422 with field errors for an invalid configuration."""
        response = test_client_with_mock_db.put("/api/mapping-configs", json={
            "name": "Bad",
            "pb_to_ado_mappings": [{"pb_level": "theme", "ado_type": "Epic"}],
        })

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "MAPPING_CONFIG_INVALID"

    def test_delete(self, seeded):
        """Should delete an existing configuration."""
        response = seeded.delete("/api/mapping-configs/config-1")

        assert response.status_code == 204

    def test_delete_missing(self, seeded):
        """Should return 404 for an unknown configuration."""
        response = seeded.delete("/api/mapping-configs/missing")

        assert response.status_code == 404


class TestReconciliationRoutes:
    """Tests for /api/reconciliation."""

    def test_report(self, seeded):
        """Should return ordered records with flags and summary."""
        # Act
        response = seeded.get("/api/reconciliation")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["config_id"] == "config-1"
        assert [r["target_item"]["id"] for r in body["records"]] == [1, 2]
        assert body["records"][0]["full_match"] is True
        assert body["records"][1]["location_match"] is False
        assert body["records"][1]["match_type"] == "partial"
        assert body["summary"]["total_count"] == 2
        assert body["filtered_count"] == 2

    def test_filters_keep_full_summary(self, seeded):
        """Should filter records without changing the summary."""
        # Act
        response = seeded.get("/api/reconciliation", params={"mismatches_only": "true"})

        # Assert
        body = response.json()
        assert [r["target_item"]["id"] for r in body["records"]] == [2]
        assert body["filtered_count"] == 1
        assert body["summary"]["total_count"] == 2
        assert body["summary"]["full_match_count"] == 1

    def test_search(self, seeded):
        """Should search by name."""
        response = seeded.get("/api/reconciliation", params={"search": "evidence"})

        assert [r["target_item"]["id"] for r in response.json()["records"]] == [2]

    def test_match_type_filter(self, seeded):
        """Should filter by match type."""
        response = seeded.get("/api/reconciliation", params={"match_type": "full"})

        assert [r["target_item"]["id"] for r in response.json()["records"]] == [1]

    def test_unknown_config(self, seeded):
        """Should return 404 for an unknown config id."""
        response = seeded.get("/api/reconciliation", params={"config_id": "missing"})

        assert response.status_code == 404

    def test_input_failure(self, seeded, mock_supabase):
        """Should return 503 when an input cannot be fetched."""
        mock_supabase.set_table_error(SOURCE_TABLE, RuntimeError("down"))

        response = seeded.get("/api/reconciliation")

        assert response.status_code == 503
        assert response.json()["error"]["details"]["input"] == "source items"

    def test_resolve(self, seeded):
        """Should resolve an ad hoc classification."""
        # Act
        response = seeded.post("/api/reconciliation/resolve", json={
            "hierarchy_level": "feature",
            "classification": {"business_unit": "Compliance"},
        })

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["expected_type"] == "Feature"
        assert body["expected_location"] == "Compliance"
        assert body["config_id"] == "config-1"
