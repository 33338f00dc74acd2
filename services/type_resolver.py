"""
Type resolution: which work item type a source level should become.
"""

from typing import Optional, Union

from config.mapping_defaults import DEFAULT_TYPE_MAPPING, UNMAPPED_LEVEL_TYPE
from models.items import HierarchyLevel
from models.mapping_config import MappingConfiguration


def resolve_expected_type(
    source_level: Union[HierarchyLevel, str],
    config: Optional[MappingConfiguration] = None
) -> str:
    """
    Get the expected target type for a source hierarchy level.

    The first type rule for the level wins. Without a configuration, or
    without a rule for the level, DEFAULT_TYPE_MAPPING applies.

    Args:
        source_level: initiative, feature or subfeature
        config: Mapping configuration (optional)

    Returns:
        Target type label, e.g. "Epic" or "User Story"
    """
    try:
        level = HierarchyLevel(source_level)
    except ValueError:
        return UNMAPPED_LEVEL_TYPE.value

    if config is not None:
        for rule in config.type_rules:
            if rule.source_level is level:
                return rule.target_type.value

    return DEFAULT_TYPE_MAPPING[level].value
