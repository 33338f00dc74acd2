"""
Source and target item schemas.

Source items come from the product-management tool (initiatives, features,
sub-features). Target items come from the work-tracking system (epics,
features, user stories). Both are read-only snapshots.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema


class HierarchyLevel(str, Enum):
    """Source hierarchy levels, broadest first."""
    INITIATIVE = "initiative"
    FEATURE = "feature"
    SUBFEATURE = "subfeature"


class TargetType(str, Enum):
    """Work item types in the work-tracking system."""
    EPIC = "Epic"
    FEATURE = "Feature"
    USER_STORY = "User Story"


class MappingLevel(str, Enum):
    """Level a level-typed location rule applies to."""
    EPIC = "epic"
    FEATURE = "feature"
    STORY = "story"


# Report ordering: initiatives, then features, then sub-features
LEVEL_ORDER = {
    HierarchyLevel.INITIATIVE: 0,
    HierarchyLevel.FEATURE: 1,
    HierarchyLevel.SUBFEATURE: 2,
}

MAPPING_LEVEL_BY_HIERARCHY = {
    HierarchyLevel.INITIATIVE: MappingLevel.EPIC,
    HierarchyLevel.FEATURE: MappingLevel.FEATURE,
    HierarchyLevel.SUBFEATURE: MappingLevel.STORY,
}


class SourceItem(BaseSchema):
    """Item from the product-management tool."""

    id: str = Field(..., min_length=1, description="Source item id")
    name: str = Field(default="", description="Item name")
    hierarchy_level: HierarchyLevel = Field(..., description="initiative, feature or subfeature")
    parent_id: Optional[str] = Field(None, description="Parent source item id")

    owner_email: Optional[str] = Field(None, description="Owning user email")
    business_unit: Optional[str] = None
    product_code: Optional[str] = None
    team: Optional[str] = None
    component_id: Optional[str] = None
    component_name: Optional[str] = None


class TargetItemRef(BaseSchema):
    """Reference to a target item (id + name)."""

    id: int
    name: Optional[str] = None


class TargetItem(BaseSchema):
    """Work item from the work-tracking system."""

    id: int = Field(..., description="Work item id")
    name: str = Field(default="", description="Work item title")
    type: str = Field(default="", description="Work item type, free text")
    parent_id: Optional[int] = Field(None, description="Parent work item id")
    location: Optional[str] = Field(None, description="Backslash-delimited area path")
    source_item_id: Optional[str] = Field(
        None,
        description="Correlation key: id of the source item this was generated from"
    )
    state: Optional[str] = None

    def to_ref(self) -> TargetItemRef:
        return TargetItemRef(id=self.id, name=self.name or None)
