"""
Text utilities for item names and links.

Used for report ordering, report search and recovering correlation keys
from work item hyperlinks.
"""

import re
import unicodedata
from typing import Any, Iterable, Optional


def normalize_name(name: Optional[str]) -> Optional[str]:
    """
    Normalize an item name for comparison and ordering.

    - "  Claims   Intake " → "claims intake"
    - "Facturación" → "facturacion"

    Args:
        name: Original name (may have accents, mixed case, extra spaces)

    Returns:
        Lowercase accent-free string with single spaces, or None if empty
    """
    if not name:
        return None

    name = name.strip()

    if not name:
        return None

    # Remove accent marks (combining characters in Unicode category 'Mn')
    decomposed = unicodedata.normalize('NFD', name)
    without_accents = ''.join(
        c for c in decomposed
        if unicodedata.category(c) != 'Mn'
    )

    return re.sub(r'\s+', ' ', without_accents).casefold()


def extract_source_item_id(
    relations: Optional[Iterable[Any]],
    pattern: str
) -> Optional[str]:
    """
    Recover a source item id from work item relations.

    Looks for the first hyperlink relation whose URL matches pattern and
    returns the pattern's first group.

    Args:
        relations: raw_data["relations"] of a work item
        pattern: Regex with one capture group for the id

    Returns:
        Source item id, or None if no hyperlink matches
    """
    if not relations:
        return None

    regex = re.compile(pattern)

    for relation in relations:
        if not isinstance(relation, dict):
            continue
        if relation.get("rel") != "Hyperlink":
            continue
        url = relation.get("url")
        if not url:
            continue
        match = regex.search(url)
        if match:
            return match.group(1)

    return None
