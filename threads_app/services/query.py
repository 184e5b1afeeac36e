"""Search filter and skip/limit pagination shared by the list actions."""

import re
from typing import Any, Optional

from beanie import SortDirection
from beanie.operators import Or, RegEx


def skip_amount(page_number: int, page_size: int) -> int:
    return (page_number - 1) * page_size


def has_next_page(total: int, skip: int, page_length: int) -> bool:
    """True when documents remain past the page that was just fetched."""
    return total > skip + page_length


def sort_direction(sort_by: str) -> SortDirection:
    if sort_by.lower() in ("asc", "ascending", "1"):
        return SortDirection.ASCENDING
    return SortDirection.DESCENDING


def name_search(search_string: Optional[str]) -> Optional[Any]:
    """
    Case-insensitive match on username OR name, or None for a blank search.
    The search text is matched literally (regex metacharacters escaped).
    """
    if not search_string or not search_string.strip():
        return None
    pattern = re.escape(search_string)
    return Or(
        RegEx("username", pattern, "i"),
        RegEx("name", pattern, "i"),
    )
