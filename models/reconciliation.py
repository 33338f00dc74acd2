"""
Reconciliation schemas.

A reconciliation record pairs one source item with its correlated target
item, the placement expected from the mapping configuration and the three
match flags. Records are derived on every request and never persisted.
"""

from pydantic import ConfigDict, Field, computed_field
from typing import Optional
from datetime import datetime
from enum import Enum

from models.base import BaseSchema
from models.items import HierarchyLevel, MappingLevel, SourceItem, TargetItem, TargetItemRef


class MatchType(str, Enum):
    """Overall match classification of a record."""
    FULL = "full"        # type, parent and location all match
    PARTIAL = "partial"  # at least one flag matches
    NONE = "none"        # nothing matches


class Classification(BaseSchema):
    """
    Attributes used to pick a location rule.

    Carries the work-tracking side values (business unit / product / team)
    and the product-management side ids and names that level-typed rules
    can also key on.
    """

    model_config = ConfigDict(frozen=True)

    business_unit: Optional[str] = None
    product_code: Optional[str] = None
    team: Optional[str] = None
    mapping_level: Optional[MappingLevel] = None

    source_initiative_id: Optional[str] = None
    source_initiative_name: Optional[str] = None
    source_product_id: Optional[str] = None
    source_product_name: Optional[str] = None
    source_component_id: Optional[str] = None
    source_component_name: Optional[str] = None
    user_email: Optional[str] = None


class ReconciliationRecord(BaseSchema):
    """Expected versus observed placement of one synchronized item."""

    model_config = ConfigDict(frozen=True)

    source_item: Optional[SourceItem] = Field(
        None,
        description="Correlated source item; None when the correlation key is dangling"
    )
    target_item: TargetItem

    expected_type: Optional[str] = None
    expected_parent: Optional[TargetItemRef] = None
    expected_location: Optional[str] = None
    observed_parent: Optional[TargetItemRef] = None

    type_match: bool = False
    parent_match: bool = False
    location_match: bool = False

    @computed_field
    @property
    def full_match(self) -> bool:
        return self.type_match and self.parent_match and self.location_match

    @computed_field
    @property
    def match_type(self) -> MatchType:
        if self.full_match:
            return MatchType.FULL
        if self.type_match or self.parent_match or self.location_match:
            return MatchType.PARTIAL
        return MatchType.NONE

    @property
    def hierarchy_level(self) -> Optional[HierarchyLevel]:
        return self.source_item.hierarchy_level if self.source_item else None


class ReconciliationSummary(BaseSchema):
    """Aggregate counts over a set of records."""

    total_count: int = 0
    full_match_count: int = 0
    partial_count: int = 0
    no_match_count: int = 0

    type_match_count: int = 0
    parent_match_count: int = 0
    location_match_count: int = 0
    orphaned_count: int = Field(0, description="Records whose correlation key names no source item")

    by_level: dict[str, int] = Field(default_factory=dict, description="Records per source hierarchy level")
    by_target_type: dict[str, int] = Field(default_factory=dict, description="Records per observed target type")


class ReconciliationReport(BaseSchema):
    """Ordered records plus summary for one configuration snapshot."""

    records: list[ReconciliationRecord]
    summary: ReconciliationSummary
    config_id: Optional[str] = None
    config_name: Optional[str] = None


class ReconciliationResponse(ReconciliationReport):
    """API response: a report, optionally filtered, stamped with its generation time."""

    filtered_count: int = Field(..., description="Records returned after filters")
    generated_at: datetime


class ResolveRequest(BaseSchema):
    """Ad hoc resolution request used by the mapping editor."""

    hierarchy_level: HierarchyLevel
    classification: Classification = Field(default_factory=Classification)
    config_id: Optional[str] = None


class ResolveResponse(BaseSchema):
    """Expected placement for an ad hoc classification."""

    expected_type: str
    expected_location: str
    config_id: Optional[str] = None
    config_name: Optional[str] = None
