"""
Deduplication pipeline components.

These modules collapse records that represent the same physical specimen
and report duplicate groups for cleanup.
"""

from catalog.deduplication.specimens import (
    DuplicateReport,
    deduplicate,
    find_duplicate_groups,
    merge_duplicates,
    select_representative,
)

__all__ = [
    "DuplicateReport",
    "deduplicate",
    "find_duplicate_groups",
    "merge_duplicates",
    "select_representative",
]
