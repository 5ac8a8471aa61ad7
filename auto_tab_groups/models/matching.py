"""Pattern matching and validation result models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from auto_tab_groups.models.conflict import Conflict


class PatternType(StrEnum):
    """The three address pattern kinds, detected by static inspection."""

    SIMPLE_WILDCARD = "simple_wildcard"
    SEGMENT_EXTRACTION = "segment_extraction"
    REGEX = "regex"


class MatchOptions(BaseModel):
    """Caller-supplied naming options for a single match."""

    model_config = ConfigDict(frozen=True)

    rule_name: str | None = None
    group_name_template: str | None = None
    allow_auto_subdomain: bool = False


class MatchResult(BaseModel):
    """Outcome of matching one URL against one pattern."""

    matched: bool
    extracted_values: dict[str, str] = Field(default_factory=dict)
    group_name: str | None = None

    @classmethod
    def no_match(cls) -> MatchResult:
        return cls(matched=False)


class ValidationResult(BaseModel):
    """Structured outcome of a validator. Validators never raise."""

    is_valid: bool
    error: str | None = None


class PatternValidationResult(ValidationResult):
    """Validation outcome that also reports the detected pattern kind."""

    pattern_type: PatternType | None = None


class RuleValidationResult(BaseModel):
    """Outcome of validating a whole rule: hard errors plus advisory warnings."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    conflicts: list[Conflict] = Field(default_factory=list)
