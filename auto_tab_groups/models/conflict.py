"""Pattern conflict model."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ConflictType(StrEnum):
    """Relationship detected between two patterns of different rules."""

    EXACT_DUPLICATE = "exact_duplicate"
    WILDCARD_SUBSUMES = "wildcard_subsumes"
    SUBSUMED_BY_WILDCARD = "subsumed_by_wildcard"
    TLD_WILDCARD_OVERLAP = "tld_wildcard_overlap"
    SEGMENT_OVERLAP = "segment_overlap"


class Conflict(BaseModel):
    """An advisory overlap between a new pattern and an existing rule's pattern."""

    source_pattern: str
    target_pattern: str
    target_rule_id: str
    target_rule_name: str
    conflict_type: ConflictType
    description: str
