"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Package read and summarized
    - GENERAL_ERROR (1): Configuration or unexpected failure
    - INVALID_PACKAGE (2): Package missing, unreadable or malformed
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_PACKAGE = 2


@dataclass
class SpaceSummary:
    """One space of a package summary.

    Attributes:
        space_id: Space identifier
        key: Space key (falls back to the name)
        name: Space name (falls back to the key)
        page_count: Number of current pages
    """
    space_id: int
    key: Optional[str]
    name: Optional[str]
    page_count: int = 0


@dataclass
class PackageSummary:
    """Counts describing an indexed package.

    Attributes:
        spaces: Spaces, ordered by id
        orphan_page_count: Current pages that belong to no space
        attachment_count: Attachments reachable from current pages
        internal_user_count: Users stored with numeric ids
        user_impl_count: Users stored with string keys
        group_count: Groups
    """
    spaces: List[SpaceSummary] = field(default_factory=list)
    orphan_page_count: int = 0
    attachment_count: int = 0
    internal_user_count: int = 0
    user_impl_count: int = 0
    group_count: int = 0

    @property
    def page_count(self) -> int:
        return sum(space.page_count for space in self.spaces) + self.orphan_page_count
