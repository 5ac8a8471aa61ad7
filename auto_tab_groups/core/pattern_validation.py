"""Static validation of patterns, host patterns and rule fields.

Every validator returns a result model and never raises or mutates its input.
"""

from __future__ import annotations

import re

from auto_tab_groups.core.domain_extraction import is_ipv4_pattern
from auto_tab_groups.core.pattern_matching import detect_pattern_type, parse_segment_pattern
from auto_tab_groups.models.matching import (
    PatternType,
    PatternValidationResult,
    ValidationResult,
)

MAX_PATTERN_LENGTH = 500
MAX_PATH_PATTERN_LENGTH = 100
MAX_RULE_NAME_LENGTH = 50
MAX_PATTERNS_PER_RULE = 20
MIN_RULE_MINIMUM_TABS = 1
MAX_RULE_MINIMUM_TABS = 10

WILDCARD_HOST_CHARS = re.compile(r"[a-zA-Z0-9.*-]+")
WILDCARD_PATH_CHARS = re.compile(r"[a-zA-Z0-9._/*-]*")
VARIABLE_NAME = re.compile(r"[a-zA-Z][a-zA-Z0-9]*")
RULE_NAME_CHARS = re.compile(r"[a-zA-Z0-9\s\-_()&.!?]+")
DOMAIN_WITH_TLD = re.compile(r"[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
DOMAIN_PREFIX = re.compile(r"[a-zA-Z0-9.-]+\.")
DOMAIN_SUFFIX = re.compile(r"[a-zA-Z0-9.-]*")
PATH_SEGMENT_CHARS = re.compile(r"[a-zA-Z0-9._/-]+")
SEGMENT_PLACEHOLDER = re.compile(r"(\{[^}]*\})")


def _invalid(error: str, pattern_type: PatternType | None = None) -> PatternValidationResult:
    return PatternValidationResult(is_valid=False, error=error, pattern_type=pattern_type)


def validate_pattern(pattern: object) -> PatternValidationResult:
    """Validate a rule pattern of any kind before it is stored."""
    if not isinstance(pattern, str) or not pattern:
        return _invalid("Pattern must be a non-empty string")

    clean = pattern.strip()
    if not clean:
        return _invalid("Pattern cannot be empty")
    if len(clean) > MAX_PATTERN_LENGTH:
        return _invalid(f"Pattern too long (max {MAX_PATTERN_LENGTH} characters)")

    pattern_type = detect_pattern_type(clean)
    if pattern_type is PatternType.SEGMENT_EXTRACTION:
        return _validate_segment_pattern(clean)
    if pattern_type is PatternType.REGEX:
        return _validate_regex_pattern(clean)
    return _validate_simple_wildcard_pattern(clean)


def _validate_simple_wildcard_pattern(pattern: str) -> PatternValidationResult:
    kind = PatternType.SIMPLE_WILDCARD
    host_pattern, slash, path_pattern = pattern.partition("/")

    if not host_pattern:
        return _invalid("Domain pattern cannot be empty", kind)
    if "***" in host_pattern:
        return _invalid("Invalid wildcard pattern (too many asterisks)", kind)
    if not WILDCARD_HOST_CHARS.fullmatch(host_pattern):
        return _invalid("Domain pattern contains invalid characters", kind)
    if _looks_like_ipv4_pattern(host_pattern):
        ip_result = validate_ipv4_pattern(host_pattern)
        if not ip_result.is_valid:
            return _invalid(ip_result.error or "Invalid IPv4 pattern", kind)
    if slash and path_pattern and not WILDCARD_PATH_CHARS.fullmatch(path_pattern):
        return _invalid("Path pattern contains invalid characters", kind)

    return PatternValidationResult(is_valid=True, pattern_type=kind)


def _looks_like_ipv4_pattern(host_pattern: str) -> bool:
    parts = host_pattern.split(".")
    return len(parts) == 4 and all(part == "*" or part.isdigit() for part in parts)


def _validate_segment_pattern(pattern: str) -> PatternValidationResult:
    kind = PatternType.SEGMENT_EXTRACTION
    info = parse_segment_pattern(pattern)

    if not info.valid:
        return _invalid("Invalid segment pattern syntax", kind)

    names = [variable.name for variable in info.variables]
    if len(set(names)) != len(names):
        return _invalid("Duplicate variable names in pattern", kind)

    for name in names:
        if not VARIABLE_NAME.fullmatch(name):
            return _invalid(f"Invalid variable name: {name}", kind)

    return PatternValidationResult(is_valid=True, pattern_type=kind)


def _validate_regex_pattern(pattern: str) -> PatternValidationResult:
    kind = PatternType.REGEX
    body = pattern[1:-1]
    if not body:
        return _invalid("Regex pattern cannot be empty", kind)

    try:
        re.compile(body)
    except re.error as exc:
        return _invalid(f"Invalid regex: {exc}", kind)
    return PatternValidationResult(is_valid=True, pattern_type=kind)


def validate_ipv4_pattern(pattern: object) -> ValidationResult:
    """Validate an IPv4 address whose octets may be ``*``."""
    if not isinstance(pattern, str):
        return ValidationResult(is_valid=False, error="IPv4 pattern must be a string")

    clean = pattern.strip()
    if not clean:
        return ValidationResult(is_valid=False, error="IPv4 pattern cannot be empty")

    parts = clean.split(".")
    if len(parts) != 4:
        return ValidationResult(is_valid=False, error="IPv4 address must have exactly 4 octets")

    for part in parts:
        if part == "*":
            continue
        if not (part.isascii() and part.isdigit()):
            return ValidationResult(
                is_valid=False, error=f'Invalid IPv4 octet "{part}". Must be 0-255 or *'
            )
        value = int(part)
        if value > 255:
            return ValidationResult(
                is_valid=False, error=f'IPv4 octet "{part}" must be between 0 and 255'
            )
        if part != str(value):
            return ValidationResult(
                is_valid=False, error=f'IPv4 octet "{part}" cannot have leading zeros'
            )

    return ValidationResult(is_valid=True)


def validate_domain_pattern(pattern: str) -> ValidationResult:
    """Strict validation of a host pattern: ``example.com``, ``*.example.com``, ``google.**``."""
    if not pattern:
        return ValidationResult(is_valid=False, error="Domain pattern cannot be empty")

    if "**" in pattern:
        pieces = pattern.split("**")
        if len(pieces) != 2:
            return ValidationResult(
                is_valid=False, error="Invalid ** pattern. Use format: domain.** or *.domain.**"
            )
        prefix, suffix = pieces
        if not prefix or not prefix.endswith("."):
            return ValidationResult(
                is_valid=False,
                error="** pattern must have domain prefix ending with dot (e.g., google.)",
            )
        if prefix.startswith("*."):
            base_prefix = prefix[2:]
            if not base_prefix or not DOMAIN_PREFIX.fullmatch(base_prefix):
                return ValidationResult(
                    is_valid=False, error="Invalid subdomain wildcard with ** pattern"
                )
        elif not DOMAIN_PREFIX.fullmatch(prefix):
            return ValidationResult(is_valid=False, error="Invalid domain prefix in ** pattern")
        if suffix and not DOMAIN_SUFFIX.fullmatch(suffix):
            return ValidationResult(is_valid=False, error="Invalid suffix in ** pattern")
        return ValidationResult(is_valid=True)

    if pattern.startswith("*."):
        base = pattern[2:]
        if not base or "." not in base:
            return ValidationResult(
                is_valid=False, error="Invalid * pattern. Use format: *.domain.com"
            )
        if "*" in base:
            return ValidationResult(
                is_valid=False, error="Multiple wildcards not allowed in domain pattern"
            )
        if not DOMAIN_WITH_TLD.fullmatch(base):
            return ValidationResult(is_valid=False, error="Invalid base domain in * pattern")
        return ValidationResult(is_valid=True)

    if not DOMAIN_WITH_TLD.fullmatch(pattern):
        return ValidationResult(is_valid=False, error="Invalid domain format")
    if pattern.startswith(".") or pattern.endswith("."):
        return ValidationResult(is_valid=False, error="Domain cannot start or end with a dot")
    if ".." in pattern:
        return ValidationResult(is_valid=False, error="Domain cannot contain consecutive dots")
    if pattern.startswith("-") or pattern.endswith("-"):
        return ValidationResult(is_valid=False, error="Domain cannot start or end with a hyphen")
    return ValidationResult(is_valid=True)


def validate_host_pattern(pattern: str) -> ValidationResult:
    """Validate a host pattern, dispatching IPv4 patterns to the IPv4 validator."""
    if not pattern:
        return ValidationResult(is_valid=False, error="Host pattern cannot be empty")
    if is_ipv4_pattern(pattern) or _looks_like_ipv4_pattern(pattern):
        return validate_ipv4_pattern(pattern)
    return validate_domain_pattern(pattern)


def is_valid_path_segment(segment: str) -> bool:
    if not segment:
        return True
    clean = segment.strip("/")
    if not clean:
        return True
    return PATH_SEGMENT_CHARS.fullmatch(clean) is not None and "//" not in clean


def validate_path_pattern(pattern: str) -> ValidationResult:
    """Validate the path part of a wildcard pattern."""
    if not pattern:
        return ValidationResult(is_valid=False, error="Path pattern cannot be empty")

    clean = pattern.removeprefix("/")
    if not clean:
        return ValidationResult(is_valid=False, error="Path pattern cannot be empty")
    if len(clean) > MAX_PATH_PATTERN_LENGTH:
        return ValidationResult(
            is_valid=False,
            error=f"Path pattern too long (max {MAX_PATH_PATTERN_LENGTH} characters)",
        )

    if "**" in clean:
        pieces = clean.split("**")
        if len(pieces) != 2:
            return ValidationResult(
                is_valid=False, error="Invalid ** pattern in path. Use format: prefix/**/suffix"
            )
        prefix, suffix = pieces
        if prefix and not is_valid_path_segment(prefix):
            return ValidationResult(is_valid=False, error="Invalid prefix in path ** pattern")
        if suffix and not is_valid_path_segment(suffix):
            return ValidationResult(is_valid=False, error="Invalid suffix in path ** pattern")
        return ValidationResult(is_valid=True)

    if not WILDCARD_PATH_CHARS.fullmatch(clean):
        return ValidationResult(is_valid=False, error="Path pattern contains invalid characters")
    if "//" in clean:
        return ValidationResult(
            is_valid=False, error="Path pattern cannot contain consecutive slashes"
        )
    return ValidationResult(is_valid=True)


def validate_rule_name(name: object) -> ValidationResult:
    """Rule names are 1-50 characters of letters, digits, spaces and ``-_()&.!?``."""
    if not isinstance(name, str) or not name:
        return ValidationResult(is_valid=False, error="Rule name must be a string")

    clean = name.strip()
    if not clean:
        return ValidationResult(is_valid=False, error="Rule name cannot be empty")
    if len(clean) > MAX_RULE_NAME_LENGTH:
        return ValidationResult(
            is_valid=False,
            error=f"Rule name cannot exceed {MAX_RULE_NAME_LENGTH} characters",
        )
    if not RULE_NAME_CHARS.fullmatch(clean):
        return ValidationResult(is_valid=False, error="Rule name contains invalid characters")
    return ValidationResult(is_valid=True)


def validate_minimum_tabs(value: object) -> ValidationResult:
    """A per-rule minimum tab count, when set, is an integer from 1 to 10."""
    if value is None:
        return ValidationResult(is_valid=True)
    if isinstance(value, bool) or not isinstance(value, int):
        return ValidationResult(
            is_valid=False, error="Minimum tabs must be a number between 1 and 10"
        )
    if not MIN_RULE_MINIMUM_TABS <= value <= MAX_RULE_MINIMUM_TABS:
        return ValidationResult(
            is_valid=False, error="Minimum tabs must be a number between 1 and 10"
        )
    return ValidationResult(is_valid=True)


def normalize_pattern(pattern: str) -> str:
    """Canonical stored form of a pattern.

    Wildcard patterns are lower-cased. Segment patterns lower-case only their
    literal text, so ``{accountId}`` still extracts under ``accountId``.
    Regex bodies keep their case since ``\\D`` and ``\\d`` differ.
    """
    clean = pattern.strip()
    pattern_type = detect_pattern_type(clean)
    if pattern_type is PatternType.REGEX:
        return clean
    if pattern_type is PatternType.SEGMENT_EXTRACTION:
        pieces = SEGMENT_PLACEHOLDER.split(clean)
        return "".join(
            piece if SEGMENT_PLACEHOLDER.fullmatch(piece) else piece.lower() for piece in pieces
        )
    return clean.lower()


def sanitize_patterns(patterns: object) -> list[str]:
    """Drop invalid and duplicate patterns, keeping first-seen order."""
    if not isinstance(patterns, list):
        return []

    seen: set[str] = set()
    valid: list[str] = []
    for pattern in patterns:
        if not validate_pattern(pattern).is_valid:
            continue
        clean = normalize_pattern(pattern)
        if clean not in seen:
            seen.add(clean)
            valid.append(clean)
    return valid


def parse_patterns_text(text: str) -> list[str]:
    """Split a newline-separated block of patterns into a de-duplicated list."""
    if not isinstance(text, str) or not text:
        return []

    result: list[str] = []
    for line in text.splitlines():
        clean = line.strip()
        if clean and normalize_pattern(clean) not in result:
            result.append(normalize_pattern(clean))
    return result
