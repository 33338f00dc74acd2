"""
Business logic services.

The resolvers and the reconciliation engine are pure functions; the
*_service modules wrap database access.
"""

from services.type_resolver import resolve_expected_type
from services.location_resolver import resolve_expected_location
from services.parent_resolver import resolve_expected_parent
from services.reconciliation_engine import reconcile, filter_records
from services.mapping_config_service import MappingConfigService, get_mapping_config_service
from services.source_item_service import SourceItemService, get_source_item_service
from services.target_item_service import TargetItemService, get_target_item_service
from services.reconciliation_service import ReconciliationService, get_reconciliation_service

__all__ = [
    "resolve_expected_type",
    "resolve_expected_location",
    "resolve_expected_parent",
    "reconcile",
    "filter_records",
    "MappingConfigService",
    "get_mapping_config_service",
    "SourceItemService",
    "get_source_item_service",
    "TargetItemService",
    "get_target_item_service",
    "ReconciliationService",
    "get_reconciliation_service",
]
