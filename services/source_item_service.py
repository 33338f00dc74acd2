"""
Source item service.

Reads the product-management item snapshot (initiatives, features,
sub-features) that reconciliation runs against.
"""

from typing import Optional
from pydantic import ValidationError as PydanticValidationError
import structlog

from config import get_supabase_client, settings
from models.base import blank_to_none
from models.items import SourceItem
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class SourceItemService:
    """Read-only access to source items."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.source_items_table

    def get_all(self) -> list[SourceItem]:
        """
        Get all source items.

        Rows that fail validation are skipped with a warning.

        Returns:
            List of SourceItem in storage order
        """
        logger.info("getting_source_items", table=self.table)

        try:
            response = self.db.table(self.table).select("*").execute()
            rows = response.data or []
        except Exception as e:
            logger.error("source_items_get_failed", error=str(e))
            raise DatabaseError("select", str(e))

        items = []
        skipped = 0
        for row in rows:
            item = self._row_to_item(row)
            if item is None:
                skipped += 1
                continue
            items.append(item)

        logger.info("source_items_retrieved", count=len(items), skipped=skipped)
        return items

    def _row_to_item(self, row: dict) -> Optional[SourceItem]:
        """Convert database row to SourceItem, or None if the row is invalid."""
        row = blank_to_none(row)
        try:
            return SourceItem(
                id=str(row["id"]),
                name=row.get("name") or "",
                hierarchy_level=row.get("level") or row.get("hierarchy_level"),
                parent_id=str(row["parent_id"]) if row.get("parent_id") else None,
                owner_email=row.get("owner_email"),
                business_unit=row.get("business_unit"),
                product_code=row.get("product_code"),
                team=row.get("team"),
                component_id=row.get("component_id"),
                component_name=row.get("component_name"),
            )
        except (KeyError, PydanticValidationError) as e:
            logger.warning("source_item_skipped", item_id=row.get("id"), error=str(e))
            return None


# Singleton instance
_source_item_service: Optional[SourceItemService] = None


def get_source_item_service() -> SourceItemService:
    """Get or create SourceItemService instance."""
    global _source_item_service
    if _source_item_service is None:
        _source_item_service = SourceItemService()
    return _source_item_service
