"""Deterministic conflict detection between rule patterns.

Conflicts are advisory: they are surfaced next to a successful save and never
fail validation.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from auto_tab_groups.models.conflict import Conflict, ConflictType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from auto_tab_groups.models.rule import Rule

_SEGMENT_VARIABLE = re.compile(r"\{[^}]+\}")
_LEADING_SEPARATORS = re.compile(r"^[.-]+")


def check_pattern_overlap(source_pattern: str, target_pattern: str) -> ConflictType | None:
    """Return how two patterns overlap, or None. Comparison is case-insensitive."""
    src = source_pattern.lower().strip()
    tgt = target_pattern.lower().strip()

    if src == tgt:
        return ConflictType.EXACT_DUPLICATE

    src_is_segment = _is_segment(src)
    tgt_is_segment = _is_segment(tgt)
    if src_is_segment or tgt_is_segment:
        return _check_segment_overlap(src, tgt, src_is_segment, tgt_is_segment)

    subsumption = _check_wildcard_subsumption(src, tgt)
    if subsumption is not None:
        return subsumption

    return _check_tld_wildcard_overlap(src, tgt)


def detect_conflicts(
    source_patterns: Iterable[str],
    existing_rules: Iterable[Rule],
    exclude_rule_id: str | None = None,
) -> list[Conflict]:
    """Cross every new pattern with every pattern of every other rule.

    Disabled rules are included: enabling them later would bring the overlap
    back.
    """
    rules = [rule for rule in existing_rules if rule.id != exclude_rule_id]
    conflicts: list[Conflict] = []

    for source in source_patterns:
        for rule in rules:
            for target in rule.patterns:
                conflict_type = check_pattern_overlap(source, target)
                if conflict_type is None:
                    continue
                conflicts.append(
                    Conflict(
                        source_pattern=source,
                        target_pattern=target,
                        target_rule_id=rule.id,
                        target_rule_name=rule.name,
                        conflict_type=conflict_type,
                        description=describe_conflict(
                            source, target, conflict_type, rule.name
                        ),
                    )
                )
    return conflicts


def describe_conflict(
    source_pattern: str,
    target_pattern: str,
    conflict_type: ConflictType,
    target_rule_name: str,
) -> str:
    """Human-readable sentence for a detected conflict."""
    if conflict_type is ConflictType.EXACT_DUPLICATE:
        return f'"{source_pattern}" is already used in rule "{target_rule_name}"'
    if conflict_type is ConflictType.WILDCARD_SUBSUMES:
        return f'"{source_pattern}" covers "{target_pattern}" in rule "{target_rule_name}"'
    if conflict_type is ConflictType.SUBSUMED_BY_WILDCARD:
        return (
            f'"{target_pattern}" in rule "{target_rule_name}" '
            f'already covers "{source_pattern}"'
        )
    if conflict_type is ConflictType.TLD_WILDCARD_OVERLAP:
        return (
            f'"{source_pattern}" and "{target_pattern}" in rule "{target_rule_name}" '
            "match overlapping domains"
        )
    return (
        f'"{source_pattern}" and "{target_pattern}" in rule "{target_rule_name}" '
        "match the same subdomains"
    )


def _is_segment(pattern: str) -> bool:
    return "{" in pattern and "}" in pattern


def is_subdomain_of(pattern: str, base_domain: str) -> bool:
    """True when a literal pattern is a strict subdomain of ``base_domain``.

    ``www.example.com`` is a subdomain of ``example.com``; ``example.com``
    itself is not.
    """
    if pattern.startswith("*.") or "{" in pattern:
        return False
    return pattern.endswith(f".{base_domain}") and len(pattern) > len(base_domain) + 1


def _check_wildcard_subsumption(src: str, tgt: str) -> ConflictType | None:
    if src.startswith("*.") and is_subdomain_of(tgt, src[2:]):
        return ConflictType.WILDCARD_SUBSUMES
    if tgt.startswith("*.") and is_subdomain_of(src, tgt[2:]):
        return ConflictType.SUBSUMED_BY_WILDCARD
    return None


def _check_tld_wildcard_overlap(src: str, tgt: str) -> ConflictType | None:
    if src.endswith(".**"):
        base_host = src[:-3]
        if tgt.startswith(f"{base_host}.") and not tgt.endswith(".**"):
            return ConflictType.TLD_WILDCARD_OVERLAP

    if tgt.endswith(".**"):
        base_host = tgt[:-3]
        if src.startswith(f"{base_host}.") and not src.endswith(".**"):
            return ConflictType.TLD_WILDCARD_OVERLAP

    return None


def segment_base_domain(pattern: str) -> str | None:
    """Base domain of a segment pattern.

    ``{sub}.example.com`` gives ``example.com``;
    ``{env}-{region}.console.aws.com`` gives ``console.aws.com``.
    """
    cleaned = _LEADING_SEPARATORS.sub("", _SEGMENT_VARIABLE.sub("", pattern))
    return cleaned or None


def _check_segment_overlap(
    src: str, tgt: str, src_is_segment: bool, tgt_is_segment: bool
) -> ConflictType | None:
    src_base = segment_base_domain(src) if src_is_segment else None
    tgt_base = segment_base_domain(tgt) if tgt_is_segment else None

    src_effective = src_base if src_is_segment else src
    tgt_effective = tgt_base if tgt_is_segment else tgt
    if not src_effective or not tgt_effective:
        return None

    # segment against a leading wildcard on the same base
    if src_is_segment and tgt.startswith("*.") and src_base == tgt[2:]:
        return ConflictType.SEGMENT_OVERLAP
    if tgt_is_segment and src.startswith("*.") and tgt_base == src[2:]:
        return ConflictType.SEGMENT_OVERLAP

    # segment against a concrete host under the same base
    if src_is_segment and not tgt_is_segment and src_base is not None:
        if tgt == src_base or is_subdomain_of(tgt, src_base):
            return ConflictType.SEGMENT_OVERLAP
    if tgt_is_segment and not src_is_segment and tgt_base is not None:
        if src == tgt_base or is_subdomain_of(src, tgt_base):
            return ConflictType.SEGMENT_OVERLAP

    if src_is_segment and tgt_is_segment and src_base == tgt_base:
        return ConflictType.SEGMENT_OVERLAP

    return None
