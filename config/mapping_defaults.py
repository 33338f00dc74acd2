"""
Default mapping values.

The fallback type table and the default configuration are named objects
so they can be asserted on and overridden, rather than living as inline
literals inside the resolvers.
"""

from types import MappingProxyType

from models.items import HierarchyLevel, TargetType
from models.mapping_config import MappingConfiguration

# Location returned when a configuration has no usable location rule
UNKNOWN_LOCATION = "Unknown"

# Value returned by the attribute resolvers when nothing matches
UNKNOWN_VALUE = "Unknown"

# Type used when no rule covers a level (applied identically whether the
# configuration is absent or simply lacks the rule)
DEFAULT_TYPE_MAPPING = MappingProxyType({
    HierarchyLevel.INITIATIVE: TargetType.EPIC,
    HierarchyLevel.FEATURE: TargetType.FEATURE,
    HierarchyLevel.SUBFEATURE: TargetType.USER_STORY,
})

# Type returned for a level outside the known hierarchy
UNMAPPED_LEVEL_TYPE = TargetType.USER_STORY

DEFAULT_MAPPING_CONFIGURATION = MappingConfiguration(
    name="Default Mapping",
    description="Default mapping configuration for product-management to work-tracking sync",
    type_rules=[
        {
            "pb_level": "initiative",
            "ado_type": "Epic",
            "description": "Map initiatives to epics",
        },
        {
            "pb_level": "feature",
            "ado_type": "Feature",
            "description": "Map features to features",
        },
        {
            "pb_level": "subfeature",
            "ado_type": "User Story",
            "description": "Map sub-features to user stories",
        },
    ],
    location_rules=[
        {
            "mapping_type": "epic",
            "pb_initiative_name": "Healthcare",
            "ado_business_unit": "Healthcare",
            "area_path": "Healthcare\\BU\\Healthcare",
            "description": "Map Healthcare initiatives to the Healthcare business unit",
        },
    ],
)
