"""
Parent resolution: which target item a synchronized item should sit under.
"""

from typing import Mapping, Optional

from models.items import SourceItem, TargetItem, TargetItemRef


def resolve_expected_parent(
    source_item: SourceItem,
    source_index: Mapping[str, SourceItem],
    correlation_index: Mapping[str, TargetItem]
) -> Optional[TargetItemRef]:
    """
    Get the expected target parent of a source item.

    The expected parent is the target counterpart of the source parent.
    It is None when the item is top-level, when the parent id names no
    known source item, or when the parent has not been synchronized yet.

    Args:
        source_item: Item being evaluated
        source_index: Source item id -> source item
        correlation_index: Source item id -> correlated target item

    Returns:
        Reference to the expected parent target item, or None
    """
    if not source_item.parent_id:
        return None

    parent = source_index.get(source_item.parent_id)
    if parent is None:
        return None

    counterpart = correlation_index.get(parent.id)
    if counterpart is None:
        return None

    return counterpart.to_ref()


def parent_matches(
    expected: Optional[TargetItemRef],
    observed_parent_id: Optional[int]
) -> bool:
    """Both absent, or both present with the same id."""
    if expected is None:
        return observed_parent_id is None
    return observed_parent_id is not None and expected.id == observed_parent_id
