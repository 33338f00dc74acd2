"""
Target item service.

Reads the work-tracking item snapshot. Work items synchronized from the
product-management tool carry the source item id in their correlation
column; older items only carry it inside a hyperlink relation in raw_data.
"""

from typing import Optional
from pydantic import ValidationError as PydanticValidationError
import structlog

from config import get_supabase_client, settings
from models.base import blank_to_none
from models.items import TargetItem
from exceptions import DatabaseError
from utils.text_utils import extract_source_item_id

logger = structlog.get_logger(__name__)


class TargetItemService:
    """Read-only access to target items."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.target_items_table
        self.link_pattern = settings.source_link_pattern

    def get_all(self, correlated_only: bool = True) -> list[TargetItem]:
        """
        Get target items.

        Args:
            correlated_only: Drop items without a correlation key

        Returns:
            List of TargetItem in storage order
        """
        logger.info("getting_target_items", table=self.table, correlated_only=correlated_only)

        try:
            response = self.db.table(self.table).select("*").execute()
            rows = response.data or []
        except Exception as e:
            logger.error("target_items_get_failed", error=str(e))
            raise DatabaseError("select", str(e))

        items = []
        skipped = 0
        recovered = 0
        for row in rows:
            item = self._row_to_item(row)
            if item is None:
                skipped += 1
                continue
            if item.source_item_id and not row.get("productboard_id"):
                recovered += 1
            if correlated_only and not item.source_item_id:
                continue
            items.append(item)

        logger.info(
            "target_items_retrieved",
            count=len(items),
            skipped=skipped,
            recovered_keys=recovered
        )
        return items

    def _row_to_item(self, row: dict) -> Optional[TargetItem]:
        """Convert database row to TargetItem, or None if the row is invalid."""
        raw_data = row.get("raw_data") or {}
        row = blank_to_none(row)

        source_item_id = row.get("productboard_id")
        if not source_item_id and isinstance(raw_data, dict):
            source_item_id = extract_source_item_id(raw_data.get("relations"), self.link_pattern)

        try:
            return TargetItem(
                id=row["id"],
                name=row.get("title") or "",
                type=row.get("type") or "",
                parent_id=row.get("parent_id"),
                location=row.get("area_path"),
                source_item_id=str(source_item_id) if source_item_id else None,
                state=row.get("state"),
            )
        except (KeyError, PydanticValidationError) as e:
            logger.warning("target_item_skipped", item_id=row.get("id"), error=str(e))
            return None


# Singleton instance
_target_item_service: Optional[TargetItemService] = None


def get_target_item_service() -> TargetItemService:
    """Get or create TargetItemService instance."""
    global _target_item_service
    if _target_item_service is None:
        _target_item_service = TargetItemService()
    return _target_item_service
