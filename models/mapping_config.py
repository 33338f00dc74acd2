"""
Mapping configuration schemas.

A mapping configuration is a named bundle of five ordered rule tables.
Rules are stored under the column keys the admin editor writes
(pb_to_ado_mappings, area_path_mappings, ...) and exposed here under
neutral attribute names. Rule order is significant: the first matching
rule wins everywhere.
"""

from pydantic import ConfigDict, Field, model_validator
from typing import Any, Optional
from datetime import datetime
from enum import Enum

from models.base import BaseSchema, RuleSchema, blank_to_none
from models.items import HierarchyLevel, TargetType, MappingLevel


class LocationSchemaKind(str, Enum):
    """Which location rule schema a rule row uses."""
    LEGACY = "legacy"            # flat business_unit / product_code / team
    LEVEL_TYPED = "level_typed"  # mapping_type + single attribute per level


LEGACY_LOCATION_FIELDS = ("business_unit", "product_code", "team")


class TypeRule(RuleSchema):
    """Source hierarchy level -> target work item type."""

    source_level: HierarchyLevel = Field(..., alias="pb_level")
    target_type: TargetType = Field(..., alias="ado_type")
    description: Optional[str] = None


class LocationRule(RuleSchema):
    """
    Classification -> location path.

    Carries both the legacy flat fields and the level-typed paired fields.
    schema_kind is derived once from the row: any legacy field set makes
    it a legacy rule, otherwise it is level-typed. An explicit schema_kind
    in the row is kept as-is.
    """

    schema_kind: LocationSchemaKind = LocationSchemaKind.LEVEL_TYPED
    mapping_level: Optional[MappingLevel] = Field(None, alias="mapping_type")

    # Source (product-management) side
    source_initiative_id: Optional[str] = Field(None, alias="pb_initiative_id")
    source_initiative_name: Optional[str] = Field(None, alias="pb_initiative_name")
    source_component_id: Optional[str] = Field(None, alias="pb_component_id")
    source_component_name: Optional[str] = Field(None, alias="pb_component_name")
    source_user_email: Optional[str] = Field(None, alias="pb_user_email")
    source_product_id: Optional[str] = Field(None, alias="pb_product_id")
    source_product_name: Optional[str] = Field(None, alias="pb_product_name")

    # Target (work-tracking) side
    target_business_unit: Optional[str] = Field(None, alias="ado_business_unit")
    target_product: Optional[str] = Field(None, alias="ado_product")
    target_team: Optional[str] = Field(None, alias="ado_team")

    # Legacy flat fields
    business_unit: Optional[str] = None
    product_code: Optional[str] = None
    team: Optional[str] = None

    location: Optional[str] = Field(None, alias="area_path")
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def derive_schema_kind(cls, data: Any) -> Any:
        data = blank_to_none(data)
        if isinstance(data, dict) and data.get("schema_kind") is None:
            is_legacy = any(data.get(name) is not None for name in LEGACY_LOCATION_FIELDS)
            data["schema_kind"] = (
                LocationSchemaKind.LEGACY if is_legacy else LocationSchemaKind.LEVEL_TYPED
            )
        return data

    @property
    def is_selectable(self) -> bool:
        """A rule without a location can never be chosen."""
        return bool(self.location)


class InitiativeEpicRule(RuleSchema):
    """Source initiative -> target epic."""

    source_initiative_id: str = Field(..., alias="pb_initiative_id")
    source_initiative_name: Optional[str] = Field(None, alias="pb_initiative_name")
    target_epic_id: Optional[int] = Field(None, alias="ado_epic_id")
    target_epic_name: Optional[str] = Field(None, alias="ado_epic_name")
    target_business_unit: Optional[str] = Field(None, alias="ado_business_unit")
    is_manually_mapped: bool = Field(default=False, alias="manually_mapped")
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def strip_blanks(cls, data: Any) -> Any:
        return blank_to_none(data)


class UserTeamRule(RuleSchema):
    """User (optionally narrowed by product / business unit) -> team."""

    user_email: Optional[str] = None
    team: str = Field(..., min_length=1)
    business_unit: Optional[str] = None
    product_code: Optional[str] = None
    source_product_id: Optional[str] = Field(None, alias="pb_product_id")
    source_product_name: Optional[str] = Field(None, alias="pb_product_name")
    source_component_id: Optional[str] = Field(None, alias="pb_component_id")
    source_component_name: Optional[str] = Field(None, alias="pb_component_name")
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def strip_blanks(cls, data: Any) -> Any:
        return blank_to_none(data)


class ComponentProductRule(RuleSchema):
    """Source component -> target product."""

    source_component_id: str = Field(..., alias="component_id")
    source_component_name: Optional[str] = Field(None, alias="component_name")
    target_product_id: Optional[str] = Field(None, alias="product_id")
    target_product_name: Optional[str] = Field(None, alias="product_name")
    business_unit: Optional[str] = None
    target_product_label: Optional[str] = Field(None, alias="ado_product")
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def strip_blanks(cls, data: Any) -> Any:
        return blank_to_none(data)

    @property
    def product_code(self) -> Optional[str]:
        """Product as location rules key it: the target label, else the product name."""
        return self.target_product_label or self.target_product_name


class MappingConfiguration(BaseSchema):
    """
    Named bundle of mapping rule tables.

    Saved whole (upsert by id); there is no partial update.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Configuration UUID")
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    workspace_id: Optional[str] = None

    type_rules: list[TypeRule] = Field(default_factory=list, alias="pb_to_ado_mappings")
    location_rules: list[LocationRule] = Field(default_factory=list, alias="area_path_mappings")
    initiative_epic_rules: list[InitiativeEpicRule] = Field(
        default_factory=list, alias="initiative_epic_mappings"
    )
    user_team_rules: list[UserTeamRule] = Field(default_factory=list, alias="user_team_mappings")
    component_product_rules: list[ComponentProductRule] = Field(
        default_factory=list, alias="component_product_mappings"
    )

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_row(self) -> dict:
        """Serialize for storage under the table's column names."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"created_at", "updated_at"},
            exclude_none=True,
        )

    def shadowed_rules(self) -> list[dict]:
        """
        List rules that can never win because an earlier rule has the same key.

        Resolution is first-match-wins, so later duplicates are silently
        ignored. This surfaces them for the editor and the save log.
        """
        shadowed = []

        seen_levels: set = set()
        for index, rule in enumerate(self.type_rules):
            if rule.source_level in seen_levels:
                shadowed.append({
                    "table": "type_rules",
                    "index": index,
                    "key": rule.source_level.value,
                })
            seen_levels.add(rule.source_level)

        seen_locations: set = set()
        for index, rule in enumerate(self.location_rules):
            if rule.schema_kind is LocationSchemaKind.LEGACY:
                key = ("legacy", rule.business_unit, rule.product_code, rule.team)
            else:
                key = (
                    rule.mapping_level,
                    rule.target_business_unit,
                    rule.target_product,
                    rule.target_team,
                    rule.source_initiative_id,
                    rule.source_initiative_name,
                    rule.source_product_id,
                    rule.source_product_name,
                    rule.source_component_id,
                    rule.source_component_name,
                    rule.source_user_email,
                )
            if key in seen_locations:
                shadowed.append({
                    "table": "location_rules",
                    "index": index,
                    "key": [str(part) for part in key if part is not None],
                })
            seen_locations.add(key)

        seen_components: set = set()
        for index, rule in enumerate(self.component_product_rules):
            if rule.source_component_id in seen_components:
                shadowed.append({
                    "table": "component_product_rules",
                    "index": index,
                    "key": rule.source_component_id,
                })
            seen_components.add(rule.source_component_id)

        return shadowed


class MappingConfigListResponse(BaseSchema):
    """List of mapping configurations."""

    data: list[MappingConfiguration]
    total: int
