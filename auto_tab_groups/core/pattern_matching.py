"""Address pattern matching.

Three pattern kinds are supported, detected in this order:

- segment extraction: contains ``{name}`` placeholders, e.g.
  ``{account}-*.{region}.console.aws.amazon.com``
- regex: wrapped in slashes, e.g. ``/^(\\d+)\\.example\\.com/``
- simple wildcard: everything else, e.g. ``*.example.com``, ``google.**``,
  ``prefix-*.example.com/docs/*``

Patterns are compiled once with ``compile_pattern`` and evaluated with
``match_compiled``. Matching never raises: any fault is a non-match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlsplit

from auto_tab_groups.core.domain_extraction import is_ipv4_address, is_ipv4_pattern, match_ipv4
from auto_tab_groups.models.matching import MatchOptions, MatchResult, PatternType

SEGMENT_VARIABLE_PATTERN = re.compile(r"\{[^}]+\}")
TLD_REMAINDER_PATTERN = re.compile(r"[a-z0-9.-]+")

DEFAULT_EXTRACTED_GROUP_NAME = "Extracted Group"

_DEFAULT_OPTIONS = MatchOptions()


@dataclass(frozen=True)
class VariableSpec:
    """A ``{name:type:delimiter}`` placeholder of a segment pattern."""

    name: str
    type: str = "segment"
    delimiter: str | None = None


@dataclass(frozen=True)
class PatternPart:
    kind: Literal["literal", "variable"]
    literal: str = ""
    variable: VariableSpec | None = None


@dataclass(frozen=True)
class SegmentPattern:
    """Tokenized segment-extraction pattern."""

    valid: bool
    variables: tuple[VariableSpec, ...]
    parts: tuple[PatternPart, ...]
    original_pattern: str


@dataclass(frozen=True)
class CompiledPattern:
    """A stored pattern parsed once into its tagged variant."""

    source: str
    kind: PatternType
    host_pattern: str = ""
    path_pattern: str | None = None
    segment: SegmentPattern | None = None
    regex: re.Pattern[str] | None = field(default=None, compare=False)
    includes_path: bool = False
    error: str | None = None


def detect_pattern_type(pattern: str) -> PatternType:
    """Classify a pattern string by static inspection."""
    if SEGMENT_VARIABLE_PATTERN.search(pattern):
        return PatternType.SEGMENT_EXTRACTION
    if len(pattern) >= 2 and pattern.startswith("/") and pattern.endswith("/"):
        return PatternType.REGEX
    return PatternType.SIMPLE_WILDCARD


def parse_variable_spec(spec: str) -> VariableSpec:
    """Parse ``name[:type[:delimiter]]``."""
    pieces = spec.split(":")
    name = pieces[0]
    var_type = pieces[1] if len(pieces) > 1 and pieces[1] else "segment"
    delimiter = pieces[2] if len(pieces) > 2 and pieces[2] else None
    return VariableSpec(name=name, type=var_type, delimiter=delimiter)


def parse_segment_pattern(pattern: str) -> SegmentPattern:
    """Tokenize a segment pattern into literal and variable parts.

    The pattern is invalid when a ``{`` is never closed or when it holds no
    variable at all. Empty ``{}`` placeholders are dropped.
    """
    variables: list[VariableSpec] = []
    parts: list[PatternPart] = []
    current = ""
    in_variable = False
    variable_body = ""

    for char in pattern:
        if char == "{" and not in_variable:
            if current:
                parts.append(PatternPart(kind="literal", literal=current))
                current = ""
            in_variable = True
            variable_body = ""
        elif char == "}" and in_variable:
            if variable_body:
                variable = parse_variable_spec(variable_body)
                variables.append(variable)
                parts.append(PatternPart(kind="variable", variable=variable))
            in_variable = False
        elif in_variable:
            variable_body += char
        else:
            current += char

    if current:
        parts.append(PatternPart(kind="literal", literal=current))

    return SegmentPattern(
        valid=not in_variable and len(variables) > 0,
        variables=tuple(variables),
        parts=tuple(parts),
        original_pattern=pattern,
    )


def build_segment_regex(info: SegmentPattern) -> re.Pattern[str]:
    """Build the anchored, case-insensitive regex for a parsed segment pattern."""
    regex = "^"
    for part in info.parts:
        if part.kind == "literal":
            regex += re.escape(part.literal).replace(r"\*", "[^.]*")
        elif part.variable is not None and part.variable.delimiter == "dash":
            regex += "([^-]+)"
        else:
            regex += "([^.]+)"
    regex += "$"
    return re.compile(regex, re.IGNORECASE)


def compile_pattern(pattern: str) -> CompiledPattern:
    """Parse a pattern into its tagged variant. Never raises.

    A pattern that cannot be compiled yields a ``CompiledPattern`` with
    ``error`` set, which never matches.
    """
    source = pattern.strip() if isinstance(pattern, str) else ""
    kind = detect_pattern_type(source)

    try:
        if kind is PatternType.SEGMENT_EXTRACTION:
            info = parse_segment_pattern(source)
            if not info.valid:
                return CompiledPattern(source, kind, segment=info, error="invalid segment pattern")
            return CompiledPattern(
                source,
                kind,
                segment=info,
                regex=build_segment_regex(info),
                includes_path="/" in source,
            )

        if kind is PatternType.REGEX:
            return CompiledPattern(source, kind, regex=re.compile(source[1:-1], re.IGNORECASE))

        clean = source.lower()
        host_pattern, slash, path_pattern = clean.partition("/")
        return CompiledPattern(
            source,
            kind,
            host_pattern=host_pattern,
            path_pattern=path_pattern if slash else None,
        )
    except (re.error, ValueError) as exc:
        return CompiledPattern(source, kind, error=str(exc))


def match_url(url: str, pattern: str, options: MatchOptions | None = None) -> MatchResult:
    """Match a URL against a raw pattern string."""
    if not url or not pattern:
        return MatchResult.no_match()
    return match_compiled(url, compile_pattern(pattern), options)


def match_compiled(
    url: str, compiled: CompiledPattern, options: MatchOptions | None = None
) -> MatchResult:
    """Match a URL against a precompiled pattern."""
    if not url or not compiled.source or compiled.error:
        return MatchResult.no_match()

    options = options or _DEFAULT_OPTIONS
    try:
        if compiled.kind is PatternType.SEGMENT_EXTRACTION:
            return _match_segment(url, compiled, options)
        if compiled.kind is PatternType.REGEX:
            return _match_regex(url, compiled, options)
        return _match_simple_wildcard(url, compiled, options)
    except Exception:
        return MatchResult.no_match()


def _split_url(url: str) -> tuple[str, str]:
    """Return (host, path) of a URL, raising ValueError when it has no scheme."""
    parts = urlsplit(url.strip())
    if not parts.scheme:
        msg = f"URL has no scheme: {url!r}"
        raise ValueError(msg)
    host = (parts.hostname or "").lower()
    path = parts.path or ("/" if parts.netloc else "")
    return host, path


def _match_simple_wildcard(url: str, compiled: CompiledPattern, options: MatchOptions) -> MatchResult:
    host, path = _split_url(url)

    if not match_domain_wildcard(host, compiled.host_pattern, options.allow_auto_subdomain):
        return MatchResult.no_match()

    if compiled.path_pattern is not None and not match_path_wildcard(
        path.lower(), compiled.path_pattern
    ):
        return MatchResult.no_match()

    return MatchResult(matched=True, group_name=options.rule_name or None)


def match_domain_wildcard(domain: str, pattern: str, allow_auto_subdomain: bool = False) -> bool:
    """Match a host against the host part of a simple wildcard pattern."""
    if not domain or not pattern:
        return False

    domain = domain.lower().strip()
    pattern = pattern.lower().strip()

    if is_ipv4_pattern(pattern) and is_ipv4_address(domain):
        return match_ipv4(domain, pattern)

    # google.** matches google.com, google.co.uk
    if "**" in pattern:
        pieces = pattern.split("**")
        if len(pieces) != 2:
            return False
        prefix, suffix = pieces
        if not domain.startswith(prefix):
            return False
        if suffix and not domain.endswith(suffix):
            return False
        remainder = domain[len(prefix) :]
        if suffix:
            remainder = remainder[: len(remainder) - len(suffix)]
        return bool(remainder) and TLD_REMAINDER_PATTERN.fullmatch(remainder) is not None

    # *.example.com matches example.com and any subdomain of it
    if pattern.startswith("*."):
        base = pattern[2:]
        if not base or "." not in base:
            return False
        return domain == base or domain.endswith(f".{base}")

    if "*" in pattern and not pattern.startswith("*"):
        return match_middle_wildcard(domain, pattern)

    if domain == pattern:
        return True

    return allow_auto_subdomain and domain.endswith(f".{pattern}")


def match_middle_wildcard(domain: str, pattern: str) -> bool:
    """Match a host where each interior ``*`` stands for a run of non-dot characters."""
    regex = "[^.]*".join(re.escape(piece) for piece in pattern.split("*"))
    return re.fullmatch(regex, domain) is not None


def match_path_wildcard(path: str, pattern: str) -> bool:
    """Match a URL path against the path part of a simple wildcard pattern."""
    if not pattern:
        return True

    path = path.removeprefix("/")
    pattern = pattern.removeprefix("/")

    # docs/**/edit: anything between prefix and suffix
    if "**" in pattern:
        pieces = pattern.split("**")
        if len(pieces) != 2:
            return False
        prefix, suffix = pieces
        if prefix and not path.startswith(prefix):
            return False
        return not suffix or path.endswith(suffix)

    if "*" in pattern:
        regex = "[^/]*".join(re.escape(piece) for piece in pattern.split("*"))
        return re.match(regex, path) is not None

    return path.startswith(pattern)


def _match_segment(url: str, compiled: CompiledPattern, options: MatchOptions) -> MatchResult:
    host, path = _split_url(url)
    info = compiled.segment
    if info is None or compiled.regex is None:
        return MatchResult.no_match()

    target = host + path if compiled.includes_path else host
    match = compiled.regex.match(target)
    if not match:
        return MatchResult.no_match()

    extracted = {
        variable.name: match.group(index)
        for index, variable in enumerate(info.variables, start=1)
    }
    return MatchResult(
        matched=True,
        extracted_values=extracted,
        group_name=generate_group_name(info, extracted, options),
    )


def generate_group_name(
    info: SegmentPattern, extracted_values: dict[str, str], options: MatchOptions
) -> str:
    """Group name for a segment match: template, first capture, rule name, default."""
    if options.group_name_template:
        name = options.group_name_template
        for key, value in extracted_values.items():
            name = name.replace(f"{{{key}}}", value, 1)
        return name

    if info.variables and extracted_values.get(info.variables[0].name):
        return extracted_values[info.variables[0].name]

    return options.rule_name or DEFAULT_EXTRACTED_GROUP_NAME


def _match_regex(url: str, compiled: CompiledPattern, options: MatchOptions) -> MatchResult:
    host, path = _split_url(url)
    if compiled.regex is None:
        return MatchResult.no_match()

    match = compiled.regex.search(host + path)
    if not match:
        return MatchResult.no_match()

    extracted = {
        f"group{index}": value
        for index, value in enumerate(match.groups(), start=1)
        if value is not None
    }
    first = match.group(1) if compiled.regex.groups else None
    return MatchResult(
        matched=True,
        extracted_values=extracted,
        group_name=first or options.rule_name or None,
    )


def get_pattern_type_display_name(pattern_type: PatternType) -> str:
    """Display name of a pattern kind."""
    if pattern_type is PatternType.SEGMENT_EXTRACTION:
        return "Segment Extraction"
    if pattern_type is PatternType.REGEX:
        return "Regular Expression"
    return "Simple Wildcard"


def get_pattern_help(pattern_type: PatternType) -> str:
    """Short usage help for a pattern kind."""
    if pattern_type is PatternType.SEGMENT_EXTRACTION:
        return (
            "Use {variable} to extract segments. "
            "Example: {accountId}-*.{region}.console.aws.amazon.com"
        )
    if pattern_type is PatternType.REGEX:
        return (
            "Advanced regex patterns. "
            "Example: /^(\\d+)-.*\\.(\\w+)\\.console\\.aws\\.amazon\\.com$/"
        )
    return (
        "Use * for single segment, ** for multiple segments. "
        "Examples: *.example.com, domain.**, prefix-*.suffix.com"
    )
