"""
Unit tests for text utilities.

Run: pytest tests/unit/test_text_utils.py -v
"""

from config import settings
from utils.text_utils import extract_source_item_id, normalize_name


class TestNormalizeName:
    """Tests for normalize_name()"""

    def test_casefolds(self):
        """Should compare case-insensitively."""
        assert normalize_name("CLAIMS Intake") == "claims intake"

    def test_removes_accents(self):
        """Should remove accents: Facturación → facturacion."""
        assert normalize_name("Facturación") == "facturacion"

    def test_collapses_whitespace(self):
        """Should trim and collapse whitespace."""
        assert normalize_name("  Claims   Intake ") == "claims intake"

    def test_empty_returns_none(self):
        """Should return None for empty or blank input."""
        assert normalize_name("") is None
        assert normalize_name("   ") is None
        assert normalize_name(None) is None


class TestExtractSourceItemId:
    """Tests for extract_source_item_id()"""

    def test_first_matching_hyperlink(self):
        """Should return the id from the first matching hyperlink."""
        relations = [
            {"rel": "Hyperlink", "url": "https://wiki.example.com/page"},
            {"rel": "Hyperlink", "url": "https://acme.productboard.com/detail/features/abc-123"},
            {"rel": "Hyperlink", "url": "https://acme.productboard.com/detail/features/def-456"},
        ]

        assert extract_source_item_id(relations, settings.source_link_pattern) == "abc-123"

    def test_ignores_non_hyperlink_relations(self):
        """Should only read Hyperlink relations."""
        relations = [
            {"rel": "ArtifactLink", "url": "https://acme.productboard.com/detail/features/abc-123"},
        ]

        assert extract_source_item_id(relations, settings.source_link_pattern) is None

    def test_missing_relations(self):
        """Should return None without relations."""
        assert extract_source_item_id(None, settings.source_link_pattern) is None
        assert extract_source_item_id([], settings.source_link_pattern) is None

    def test_skips_malformed_entries(self):
        """Should skip entries that are not relation dicts."""
        relations = ["junk", {"rel": "Hyperlink"}, {"rel": "Hyperlink", "url": None}]

        assert extract_source_item_id(relations, settings.source_link_pattern) is None
