"""
Result records and search configuration for qfind.
"""

from typing import NamedTuple, Optional, Pattern

from .utils import join_path

# Entry types as shown to the user and accepted by --type
TYPE_DIRECTORY = "d"
TYPE_OBJECT = "o"

API_DIRECTORY_TYPE = "FS_FILE_TYPE_DIRECTORY"

DEFAULT_PARALLEL = 50


class Entry(NamedTuple):
    """One search result. ``name`` is empty when the entry is the root itself."""

    parent: str
    name: str
    type: str
    size: int
    depth: int

    @property
    def path(self) -> str:
        return join_path(self.parent, self.name)

    def to_dict(self) -> dict:
        return {
            "parent": self.parent,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "depth": self.depth,
        }


class SearchCriteria(NamedTuple):
    """Immutable search configuration shared by every root task."""

    name_pattern: Optional[Pattern] = None
    min_size: Optional[int] = None
    entry_type: Optional[str] = None
    mindepth: Optional[int] = None
    maxdepth: Optional[int] = None
    limit: Optional[int] = None
    json_output: bool = False
    parallel: int = DEFAULT_PARALLEL
    verbose: bool = False


def entry_type_from_api(api_type: Optional[str]) -> str:
    """Map a Qumulo file type to a qfind entry type."""
    if api_type == API_DIRECTORY_TYPE:
        return TYPE_DIRECTORY
    return TYPE_OBJECT


def entry_from_api(parent: str, attrs: dict, depth: int) -> Entry:
    """Build an Entry from a directory listing item or an attributes response."""
    try:
        size = int(attrs.get("size", 0))
    except (ValueError, TypeError):
        size = 0

    return Entry(
        parent=parent,
        name=attrs.get("name", ""),
        type=entry_type_from_api(attrs.get("type")),
        size=size,
        depth=depth,
    )
