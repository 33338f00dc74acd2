"""
Reconciliation engine: core comparison logic.

Joins source items to target items through the correlation key, works
out where each target item should be (type, parent, location) from the
mapping configuration and compares that with where it is.

Pure and synchronous: inputs are in-memory snapshots, nothing is
mutated, and identical input always yields identical output. Per-item
problems become mismatch flags; they never abort the run.
"""

from collections import Counter
from typing import Iterable, Optional, Sequence
import structlog

from config.mapping_defaults import UNKNOWN_LOCATION
from models.items import LEVEL_ORDER, SourceItem, TargetItem, TargetItemRef, TargetType
from models.mapping_config import MappingConfiguration
from models.reconciliation import (
    MatchType,
    ReconciliationRecord,
    ReconciliationReport,
    ReconciliationSummary,
)
from services.attribute_resolver import build_classification
from services.location_resolver import resolve_expected_location
from services.parent_resolver import parent_matches, resolve_expected_parent
from services.type_resolver import resolve_expected_type
from utils.text_utils import normalize_name

logger = structlog.get_logger(__name__)

KNOWN_TARGET_TYPES = {target_type.value for target_type in TargetType}
OTHER_TARGET_TYPE = "Other"


# ===================
# INDEXES
# ===================

def build_source_index(source_items: Iterable[SourceItem]) -> dict[str, SourceItem]:
    """Source item id -> source item (first occurrence wins)."""
    index: dict[str, SourceItem] = {}
    for item in source_items:
        index.setdefault(item.id, item)
    return index


def build_correlation_index(target_items: Iterable[TargetItem]) -> dict[str, TargetItem]:
    """
    Source item id -> correlated target item.

    Only target items carrying a correlation key take part. When several
    target items name the same source item, the first one is used.
    """
    index: dict[str, TargetItem] = {}
    for item in target_items:
        if item.source_item_id:
            index.setdefault(item.source_item_id, item)
    return index


# ===================
# RECORDS
# ===================

def _observed_parent(
    target_item: TargetItem,
    target_index: dict[int, TargetItem]
) -> Optional[TargetItemRef]:
    if target_item.parent_id is None:
        return None
    parent = target_index.get(target_item.parent_id)
    if parent is None:
        return TargetItemRef(id=target_item.parent_id)
    return parent.to_ref()


def _reconcile_item(
    source_item: SourceItem,
    target_item: TargetItem,
    source_index: dict[str, SourceItem],
    correlation_index: dict[str, TargetItem],
    target_index: dict[int, TargetItem],
    config: Optional[MappingConfiguration],
    unknown_location: str
) -> ReconciliationRecord:
    expected_type = resolve_expected_type(source_item.hierarchy_level, config)

    classification = build_classification(source_item, source_index, config)
    expected_location = resolve_expected_location(classification, config, unknown=unknown_location)

    expected_parent = resolve_expected_parent(source_item, source_index, correlation_index)

    return ReconciliationRecord(
        source_item=source_item,
        target_item=target_item,
        expected_type=expected_type,
        expected_parent=expected_parent,
        expected_location=expected_location,
        observed_parent=_observed_parent(target_item, target_index),
        type_match=bool(target_item.type) and target_item.type == expected_type,
        parent_match=parent_matches(expected_parent, target_item.parent_id),
        location_match=bool(target_item.location) and target_item.location == expected_location,
    )


def _unmatched_record(
    target_item: TargetItem,
    target_index: dict[int, TargetItem],
    source_item: Optional[SourceItem] = None
) -> ReconciliationRecord:
    return ReconciliationRecord(
        source_item=source_item,
        target_item=target_item,
        observed_parent=_observed_parent(target_item, target_index),
    )


def record_sort_key(record: ReconciliationRecord) -> tuple:
    """
    Level (initiative, feature, subfeature), then case-insensitive source
    name, then source id and target id. Records without a source item
    sort after every level.
    """
    source = record.source_item
    if source is None:
        return (len(LEVEL_ORDER), "", "", record.target_item.id)
    return (
        LEVEL_ORDER[source.hierarchy_level],
        normalize_name(source.name) or "",
        source.id,
        record.target_item.id,
    )


# ===================
# SUMMARY
# ===================

def summarize(records: Sequence[ReconciliationRecord]) -> ReconciliationSummary:
    """
    Aggregate counts over records.

    full + partial + none always equals the record count.
    """
    match_types = Counter(record.match_type for record in records)

    by_level: Counter = Counter()
    by_target_type: Counter = Counter()
    for record in records:
        level = record.hierarchy_level
        by_level[level.value if level else "unknown"] += 1
        observed = record.target_item.type
        by_target_type[observed if observed in KNOWN_TARGET_TYPES else OTHER_TARGET_TYPE] += 1

    return ReconciliationSummary(
        total_count=len(records),
        full_match_count=match_types[MatchType.FULL],
        partial_count=match_types[MatchType.PARTIAL],
        no_match_count=match_types[MatchType.NONE],
        type_match_count=sum(1 for r in records if r.type_match),
        parent_match_count=sum(1 for r in records if r.parent_match),
        location_match_count=sum(1 for r in records if r.location_match),
        orphaned_count=sum(1 for r in records if r.source_item is None),
        by_level=dict(sorted(by_level.items())),
        by_target_type=dict(sorted(by_target_type.items())),
    )


# ===================
# ENTRY POINT
# ===================

def reconcile(
    source_items: Sequence[SourceItem],
    target_items: Sequence[TargetItem],
    config: Optional[MappingConfiguration] = None,
    unknown_location: str = UNKNOWN_LOCATION
) -> ReconciliationReport:
    """
    Compare expected and observed placement of every synchronized item.

    Steps:
        1. Correlate target items to source items via source_item_id.
           Target items without a key are left out of the report.
        2. Per correlated target item, resolve expected type, location and
           parent and compare with the observed values.
        3. Order by level, then source name.
        4. Summarize.

    Args:
        source_items: Product-management items
        target_items: Work-tracking items (uncorrelated ones are ignored)
        config: Mapping configuration; None means defaults only
        unknown_location: Location sentinel

    Returns:
        ReconciliationReport with ordered records and summary
    """
    source_index = build_source_index(source_items)
    correlation_index = build_correlation_index(target_items)
    target_index = {item.id: item for item in target_items}

    records: list[ReconciliationRecord] = []

    for target_item in target_items:
        if not target_item.source_item_id:
            continue

        source_item = source_index.get(target_item.source_item_id)
        if source_item is None:
            logger.warning(
                "dangling_correlation_key",
                target_item_id=target_item.id,
                source_item_id=target_item.source_item_id
            )
            records.append(_unmatched_record(target_item, target_index))
            continue

        try:
            record = _reconcile_item(
                source_item,
                target_item,
                source_index,
                correlation_index,
                target_index,
                config,
                unknown_location,
            )
        except Exception as e:
            logger.error(
                "reconcile_item_failed",
                target_item_id=target_item.id,
                source_item_id=source_item.id,
                error=str(e),
                error_type=type(e).__name__
            )
            record = _unmatched_record(target_item, target_index, source_item)

        records.append(record)

    records.sort(key=record_sort_key)
    summary = summarize(records)

    logger.info(
        "reconciliation_complete",
        config_id=config.id if config else None,
        total=summary.total_count,
        full=summary.full_match_count,
        partial=summary.partial_count,
        none=summary.no_match_count
    )

    return ReconciliationReport(
        records=records,
        summary=summary,
        config_id=config.id if config else None,
        config_name=config.name if config else None,
    )


# ===================
# FILTERING
# ===================

def filter_records(
    records: Iterable[ReconciliationRecord],
    match_type: Optional[MatchType] = None,
    mismatches_only: bool = False,
    search: Optional[str] = None
) -> list[ReconciliationRecord]:
    """
    Narrow a record list for display. Order is preserved.

    Args:
        match_type: Keep only records of this match type
        mismatches_only: Drop full matches
        search: Case-insensitive substring of source/target name or id
    """
    needle = normalize_name(search) if search else None

    filtered = []
    for record in records:
        if match_type is not None and record.match_type is not match_type:
            continue
        if mismatches_only and record.full_match:
            continue
        if needle:
            source = record.source_item
            haystack = [
                record.target_item.name,
                str(record.target_item.id),
                source.name if source else None,
                source.id if source else None,
            ]
            if not any(needle in (normalize_name(value) or "") for value in haystack if value):
                continue
        filtered.append(record)

    return filtered
