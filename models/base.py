"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict
from typing import Any


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class RuleSchema(BaseModel):
    """
    Base for mapping rule rows.

    Rules are immutable once loaded. Fields are read and written under the
    storage key names (aliases) but may also be populated by attribute name.
    Blank strings coming from editor forms are treated as unset.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        frozen=True
    )


def blank_to_none(data: Any) -> Any:
    """Replace empty or whitespace-only string values in a row dict with None."""
    if not isinstance(data, dict):
        return data
    return {
        key: (None if isinstance(value, str) and not value.strip() else value)
        for key, value in data.items()
    }
