"""
Test data factories.

Uses factory pattern to generate consistent test data.
create() returns models for the pure engine; row() returns dicts shaped
like the database rows the services read.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from models.items import SourceItem, TargetItem
from models.mapping_config import MappingConfiguration


class SourceItemFactory:
    """
    Factory for creating test source items.

    Usage:
        # Create with defaults
        item = SourceItemFactory.create()

        # Create with overrides
        item = SourceItemFactory.create(hierarchy_level="initiative", business_unit="Compliance")

        # Create multiple
        items = SourceItemFactory.create_batch(5)
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        name: Optional[str] = None,
        hierarchy_level: str = "feature",
        parent_id: Optional[str] = None,
        **attributes
    ) -> SourceItem:
        """
        Create a single source item.

        Args:
            id: Source item id (auto-generated if not provided)
            name: Item name (auto-generated if not provided)
            hierarchy_level: initiative, feature or subfeature
            parent_id: Parent source item id
            **attributes: owner_email, business_unit, product_code, team, component_id, ...

        Returns:
            SourceItem
        """
        counter = cls._next_counter()
        return SourceItem(
            id=id or f"s{counter}",
            name=name if name is not None else f"Source Item {counter}",
            hierarchy_level=hierarchy_level,
            parent_id=parent_id,
            **attributes
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        """Create multiple source items."""
        return [cls.create(**overrides) for _ in range(count)]

    @classmethod
    def row(
        cls,
        id: Optional[str] = None,
        name: Optional[str] = None,
        level: str = "feature",
        parent_id: Optional[str] = None,
        **columns
    ) -> dict:
        """Create a productboard_features row dict."""
        counter = cls._next_counter()
        return {
            "id": id or str(uuid4()),
            "name": name if name is not None else f"Source Item {counter}",
            "level": level,
            "parent_id": parent_id,
            "owner_email": None,
            **columns
        }

    @classmethod
    def reset_counter(cls):
        """Reset the counter (call in test setup if needed)."""
        cls._counter = 0


class TargetItemFactory:
    """Factory for creating test target (work) items."""

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        id: Optional[int] = None,
        name: Optional[str] = None,
        type: str = "Feature",
        parent_id: Optional[int] = None,
        location: Optional[str] = None,
        source_item_id: Optional[str] = None,
        state: Optional[str] = "Active"
    ) -> TargetItem:
        """Create a single target item."""
        counter = cls._next_counter()
        return TargetItem(
            id=id if id is not None else 1000 + counter,
            name=name if name is not None else f"Work Item {counter}",
            type=type,
            parent_id=parent_id,
            location=location,
            source_item_id=source_item_id,
            state=state,
        )

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        """Create multiple target items."""
        return [cls.create(**overrides) for _ in range(count)]

    @classmethod
    def row(
        cls,
        id: Optional[int] = None,
        title: Optional[str] = None,
        type: str = "Feature",
        parent_id: Optional[int] = None,
        area_path: Optional[str] = None,
        productboard_id: Optional[str] = None,
        relations: Optional[list] = None,
        state: str = "Active"
    ) -> dict:
        """Create an ado_work_items row dict."""
        counter = cls._next_counter()
        return {
            "id": id if id is not None else 1000 + counter,
            "title": title if title is not None else f"Work Item {counter}",
            "type": type,
            "state": state,
            "parent_id": parent_id,
            "area_path": area_path,
            "productboard_id": productboard_id,
            "raw_data": {"relations": relations or []},
        }

    @classmethod
    def reset_counter(cls):
        """Reset the counter."""
        cls._counter = 0


class MappingConfigFactory:
    """
    Factory for creating test mapping configurations.

    Rules are given in their stored (column key) shape.

    Usage:
        config = MappingConfigFactory.create(location_rules=[
            {"business_unit": "Compliance", "area_path": "Healthcare\\\\BU\\\\Compliance"}
        ])
    """

    @classmethod
    def create(
        cls,
        id: Optional[str] = None,
        name: str = "Test Mapping",
        type_rules: Optional[list] = None,
        location_rules: Optional[list] = None,
        initiative_epic_rules: Optional[list] = None,
        user_team_rules: Optional[list] = None,
        component_product_rules: Optional[list] = None
    ) -> MappingConfiguration:
        """Create a configuration model."""
        return MappingConfiguration.model_validate(
            cls.row(
                id=id,
                name=name,
                type_rules=type_rules,
                location_rules=location_rules,
                initiative_epic_rules=initiative_epic_rules,
                user_team_rules=user_team_rules,
                component_product_rules=component_product_rules,
            )
        )

    @classmethod
    def row(
        cls,
        id: Optional[str] = None,
        name: str = "Test Mapping",
        type_rules: Optional[list] = None,
        location_rules: Optional[list] = None,
        initiative_epic_rules: Optional[list] = None,
        user_team_rules: Optional[list] = None,
        component_product_rules: Optional[list] = None,
        created_at: Optional[str] = None
    ) -> dict:
        """Create a hierarchy_mappings row dict."""
        now = datetime.utcnow().isoformat() + "Z"
        return {
            "id": id or str(uuid4()),
            "name": name,
            "description": None,
            "workspace_id": None,
            "pb_to_ado_mappings": type_rules or [],
            "area_path_mappings": location_rules or [],
            "initiative_epic_mappings": initiative_epic_rules or [],
            "user_team_mappings": user_team_rules or [],
            "component_product_mappings": component_product_rules or [],
            "created_at": created_at or now,
            "updated_at": created_at or now,
        }
