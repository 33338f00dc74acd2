"""
Attribute resolution from the cross-reference rule tables.

Resolves the product of a component, the team of a story and the
business unit of an initiative, and assembles the classification the
location resolver works from.
"""

from typing import Mapping, Optional

from config.mapping_defaults import UNKNOWN_VALUE
from models.items import MAPPING_LEVEL_BY_HIERARCHY, HierarchyLevel, SourceItem
from models.mapping_config import (
    ComponentProductRule,
    InitiativeEpicRule,
    MappingConfiguration,
    UserTeamRule,
)
from models.reconciliation import Classification


# ===================
# COMPONENT -> PRODUCT
# ===================

def find_component_rule(
    component_id: Optional[str],
    config: Optional[MappingConfiguration]
) -> Optional[ComponentProductRule]:
    if not component_id or config is None:
        return None
    for rule in config.component_product_rules:
        if rule.source_component_id == component_id:
            return rule
    return None


def resolve_product_for_component(
    component_id: Optional[str],
    config: Optional[MappingConfiguration]
) -> str:
    """
    Get the product a component belongs to.

    Returns:
        Product name of the first rule for the component, or "Unknown"
    """
    rule = find_component_rule(component_id, config)
    if rule is None or not rule.target_product_name:
        return UNKNOWN_VALUE
    return rule.target_product_name


# ===================
# USER -> TEAM
# ===================

def find_team_rule(
    user_email: Optional[str],
    component_id: Optional[str],
    business_unit: Optional[str],
    config: Optional[MappingConfiguration]
) -> Optional[UserTeamRule]:
    """
    Find the user-to-team rule for a story owner.

    The component's product (via component-to-product rules) narrows the
    search. Tiers, first match wins:
        email + product + business unit, email + product,
        email + business unit, email,
        product + business unit, product, business unit

    A tier is only tried when every attribute it constrains is known.
    """
    if config is None:
        return None

    component_rule = find_component_rule(component_id, config)
    product = component_rule.target_product_name if component_rule else None

    wanted = {
        "user_email": user_email or None,
        "product_code": product,
        "business_unit": business_unit or None,
    }
    tiers = (
        ("user_email", "product_code", "business_unit"),
        ("user_email", "product_code"),
        ("user_email", "business_unit"),
        ("user_email",),
        ("product_code", "business_unit"),
        ("product_code",),
        ("business_unit",),
    )

    for fields in tiers:
        if any(wanted[name] is None for name in fields):
            continue
        for rule in config.user_team_rules:
            if all(getattr(rule, name) == wanted[name] for name in fields):
                return rule

    return None


def resolve_team_for_story(
    user_email: Optional[str],
    component_id: Optional[str],
    business_unit: Optional[str],
    config: Optional[MappingConfiguration]
) -> str:
    """
    Get the team a story should be assigned to.

    Falls back to the first rule's team, then to "Unknown".
    """
    rule = find_team_rule(user_email, component_id, business_unit, config)
    if rule is not None:
        return rule.team
    if config is not None and config.user_team_rules:
        return config.user_team_rules[0].team
    return UNKNOWN_VALUE


# ===================
# INITIATIVE -> BUSINESS UNIT
# ===================

def find_initiative_rule(
    initiative_id: Optional[str],
    config: Optional[MappingConfiguration]
) -> Optional[InitiativeEpicRule]:
    if not initiative_id or config is None:
        return None
    for rule in config.initiative_epic_rules:
        if rule.source_initiative_id == initiative_id:
            return rule
    return None


def resolve_business_unit_for_initiative(
    initiative_id: Optional[str],
    config: Optional[MappingConfiguration]
) -> str:
    """
    Get the business unit of an initiative.

    Uses the target business unit of the initiative's epic rule; rules
    written before that field existed carry the business unit as the first
    word of their description.
    """
    rule = find_initiative_rule(initiative_id, config)
    if rule is None:
        return UNKNOWN_VALUE
    if rule.target_business_unit:
        return rule.target_business_unit
    if rule.description and rule.description.split():
        return rule.description.split()[0]
    return UNKNOWN_VALUE


# ===================
# CLASSIFICATION
# ===================

def find_initiative_ancestor(
    source_item: SourceItem,
    source_index: Mapping[str, SourceItem]
) -> Optional[SourceItem]:
    """Nearest initiative-level item at or above source_item."""
    seen: set[str] = set()
    current: Optional[SourceItem] = source_item
    while current is not None and current.id not in seen:
        if current.hierarchy_level is HierarchyLevel.INITIATIVE:
            return current
        seen.add(current.id)
        current = source_index.get(current.parent_id) if current.parent_id else None
    return None


def build_classification(
    source_item: SourceItem,
    source_index: Mapping[str, SourceItem],
    config: Optional[MappingConfiguration]
) -> Classification:
    """
    Assemble the classification of a source item.

    Attributes on the item win. Missing ones are filled from the rule
    tables, and only from a rule that actually matched:
        business unit from the initiative ancestor's epic rule,
        product from the component's product rule,
        team (stories only) from a team rule for the owner's email.
    """
    initiative = find_initiative_ancestor(source_item, source_index)
    component_rule = find_component_rule(source_item.component_id, config)

    business_unit = source_item.business_unit
    if not business_unit and initiative is not None:
        initiative_rule = find_initiative_rule(initiative.id, config)
        if initiative_rule is not None:
            business_unit = initiative_rule.target_business_unit

    product_code = source_item.product_code
    if not product_code and component_rule is not None:
        product_code = component_rule.product_code

    # Stories only; team rules not keyed on the owner's email are ignored
    team = source_item.team
    if (
        not team
        and source_item.owner_email
        and source_item.hierarchy_level is HierarchyLevel.SUBFEATURE
    ):
        team_rule = find_team_rule(
            source_item.owner_email,
            source_item.component_id,
            business_unit,
            config,
        )
        if team_rule is not None and team_rule.user_email == source_item.owner_email:
            team = team_rule.team

    return Classification(
        business_unit=business_unit or None,
        product_code=product_code or None,
        team=team or None,
        mapping_level=MAPPING_LEVEL_BY_HIERARCHY[source_item.hierarchy_level],
        source_initiative_id=initiative.id if initiative else None,
        source_initiative_name=(initiative.name or None) if initiative else None,
        source_product_id=component_rule.target_product_id if component_rule else None,
        source_product_name=component_rule.target_product_name if component_rule else None,
        source_component_id=source_item.component_id,
        source_component_name=source_item.component_name,
        user_email=source_item.owner_email,
    )
