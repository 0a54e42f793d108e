"""
Filtering logic for qfind.

This module builds the entry predicate from SearchCriteria. The walker applies
it to every entry it discovers, so only matches ever reach the output.
"""

import re
from typing import Callable, Optional, Pattern

from .models import Entry, SearchCriteria, TYPE_DIRECTORY, TYPE_OBJECT

EntryFilter = Callable[[Entry], bool]

TYPE_CHOICES = (TYPE_DIRECTORY, TYPE_OBJECT)


def compile_name_pattern(pattern: Optional[str]) -> Optional[Pattern]:
    """
    Compile a --name regular expression.

    Raises:
        ValueError: If the pattern is not a valid regular expression
    """
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid pattern '{pattern}': {e}") from e


def has_filters(criteria: SearchCriteria) -> bool:
    return any(
        value is not None
        for value in (
            criteria.name_pattern,
            criteria.min_size,
            criteria.entry_type,
            criteria.mindepth,
            criteria.maxdepth,
        )
    )


def match_all(entry: Entry) -> bool:
    return True


def create_entry_filter(criteria: SearchCriteria) -> EntryFilter:
    """Create an entry filter function from the search criteria."""
    if not has_filters(criteria):
        return match_all

    name_pattern = criteria.name_pattern
    min_size = criteria.min_size
    entry_type = criteria.entry_type
    mindepth = criteria.mindepth
    maxdepth = criteria.maxdepth

    def entry_filter(entry: Entry) -> bool:
        """Filter function that returns True if entry matches all criteria."""
        if entry_type is not None and entry.type != entry_type:
            return False

        if name_pattern is not None and not name_pattern.search(entry.name or ""):
            return False

        if min_size is not None and entry.size <= min_size:
            return False

        if mindepth is not None and entry.depth < mindepth:
            return False

        if maxdepth is not None and entry.depth > maxdepth:
            return False

        return True

    return entry_filter
