"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, RuleSchema
from models.items import (
    HierarchyLevel,
    TargetType,
    MappingLevel,
    SourceItem,
    TargetItem,
    TargetItemRef,
)
from models.mapping_config import (
    LocationSchemaKind,
    TypeRule,
    LocationRule,
    InitiativeEpicRule,
    UserTeamRule,
    ComponentProductRule,
    MappingConfiguration,
    MappingConfigListResponse,
)
from models.reconciliation import (
    MatchType,
    Classification,
    ReconciliationRecord,
    ReconciliationSummary,
    ReconciliationReport,
    ReconciliationResponse,
    ResolveRequest,
    ResolveResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "RuleSchema",

    # Items
    "HierarchyLevel",
    "TargetType",
    "MappingLevel",
    "SourceItem",
    "TargetItem",
    "TargetItemRef",

    # Mapping configuration
    "LocationSchemaKind",
    "TypeRule",
    "LocationRule",
    "InitiativeEpicRule",
    "UserTeamRule",
    "ComponentProductRule",
    "MappingConfiguration",
    "MappingConfigListResponse",

    # Reconciliation
    "MatchType",
    "Classification",
    "ReconciliationRecord",
    "ReconciliationSummary",
    "ReconciliationReport",
    "ReconciliationResponse",
    "ResolveRequest",
    "ResolveResponse",
]
