"""
Location resolution: which area path an item should be filed under.

Rules come in two schemas, tagged on each rule by schema_kind:

- level-typed: a mapping level (epic / feature / story) plus a single
  attribute per level (business unit for epics, product for features,
  team for stories), keyed either by the work-tracking value or by the
  product-management id / name.
- legacy: flat business_unit / product_code / team triples.

Precedence, most specific first:
    1. level-typed exact hit
    2. legacy business unit + product + team
    3. legacy business unit + product
    4. legacy business unit
    5. first level-typed rule for the item's mapping level
    6. first usable rule in the table
    7. the "Unknown" sentinel
"""

from typing import Iterable, Optional

from config.mapping_defaults import UNKNOWN_LOCATION
from models.items import MappingLevel
from models.mapping_config import LocationRule, LocationSchemaKind, MappingConfiguration
from models.reconciliation import Classification


def _level_typed_pairs(rule: LocationRule, classification: Classification) -> list[tuple]:
    """(rule value, classification value) pairs a level-typed rule can hit on."""
    if rule.mapping_level is MappingLevel.EPIC:
        return [
            (rule.target_business_unit, classification.business_unit),
            (rule.source_initiative_id, classification.source_initiative_id),
            (rule.source_initiative_name, classification.source_initiative_name),
        ]
    if rule.mapping_level is MappingLevel.FEATURE:
        return [
            (rule.target_product, classification.product_code),
            (rule.source_product_id, classification.source_product_id),
            (rule.source_product_name, classification.source_product_name),
        ]
    if rule.mapping_level is MappingLevel.STORY:
        return [
            (rule.target_team, classification.team),
            (rule.source_component_id, classification.source_component_id),
            (rule.source_component_name, classification.source_component_name),
            (rule.source_user_email, classification.user_email),
        ]
    return []


def _level_typed_hit(rule: LocationRule, classification: Classification) -> bool:
    if (
        classification.mapping_level is not None
        and rule.mapping_level is not classification.mapping_level
    ):
        return False
    return any(
        wanted is not None and wanted == actual
        for wanted, actual in _level_typed_pairs(rule, classification)
    )


def _first_preferring(
    candidates: Iterable[LocationRule],
    unconstrained: tuple[str, ...]
) -> Optional[LocationRule]:
    """
    First candidate leaving the given attributes unset, else first candidate.

    A rule that only constrains the attributes of the current tier is the
    one written for it; a narrower rule is used only when no such rule
    exists.
    """
    first = None
    for rule in candidates:
        if all(getattr(rule, name) is None for name in unconstrained):
            return rule
        if first is None:
            first = rule
    return first


def _legacy_hit(
    rules: list[LocationRule],
    classification: Classification
) -> Optional[LocationRule]:
    bu = classification.business_unit
    product = classification.product_code
    team = classification.team

    # Exact triple, absent attributes included
    if bu is not None or product is not None or team is not None:
        for rule in rules:
            if (rule.business_unit, rule.product_code, rule.team) == (bu, product, team):
                return rule

    if bu is not None and product is not None:
        match = _first_preferring(
            (r for r in rules if r.business_unit == bu and r.product_code == product),
            unconstrained=("team",),
        )
        if match:
            return match

    if bu is not None:
        match = _first_preferring(
            (r for r in rules if r.business_unit == bu),
            unconstrained=("product_code", "team"),
        )
        if match:
            return match

    return None


def find_location_rule(
    classification: Classification,
    config: Optional[MappingConfiguration]
) -> Optional[LocationRule]:
    """
    Find the location rule that applies to a classification.

    Rules without a location are skipped at every tier.

    Returns:
        The matching rule, the first usable rule as a default, or None
        when the configuration has no usable location rule
    """
    if config is None:
        return None

    usable = [rule for rule in config.location_rules if rule.is_selectable]
    if not usable:
        return None

    for rule in usable:
        if rule.schema_kind is LocationSchemaKind.LEVEL_TYPED and _level_typed_hit(rule, classification):
            return rule

    legacy = [rule for rule in usable if rule.schema_kind is LocationSchemaKind.LEGACY]
    match = _legacy_hit(legacy, classification)
    if match:
        return match

    if classification.mapping_level is not None:
        for rule in usable:
            if (
                rule.schema_kind is LocationSchemaKind.LEVEL_TYPED
                and rule.mapping_level is classification.mapping_level
            ):
                return rule

    return usable[0]


def resolve_expected_location(
    classification: Classification,
    config: Optional[MappingConfiguration] = None,
    unknown: str = UNKNOWN_LOCATION
) -> str:
    """
    Get the expected location path for a classification.

    Args:
        classification: Known attributes of the item
        config: Mapping configuration (optional)
        unknown: Sentinel returned when no rule applies

    Returns:
        Backslash-delimited location path, or the sentinel
    """
    rule = find_location_rule(classification, config)
    if rule is None:
        return unknown
    return rule.location
