"""Pydantic-based types for style rules.

This module defines the rule data model:

- Scope: The language (or "general") context a rule applies to
- Severity: Whether a rule is advisory, required or disallowed
- RuleExample: A good/bad snippet pair illustrating a rule
- RuleDefinition: One immutable style rule
"""

import re
from enum import StrEnum
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from stylebook.errors import RuleValidationError

_CATEGORY_SEPARATORS = re.compile(r"[\s_]+")


class Scope(StrEnum):
    """Recognised rule scopes."""

    GENERAL = "general"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    RUST = "rust"
    KOTLIN = "kotlin"
    SQL = "sql"
    SWIFT = "swift"

    @classmethod
    def try_parse(cls, value: object) -> "Scope | None":
        """Parse a scope string, returning None when it is not recognised.

        Matching is case-insensitive and accepts the short aliases
        listed in ``_SCOPE_ALIASES``.
        """
        if isinstance(value, Scope):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        key = _SCOPE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None

    @classmethod
    def parse(cls, value: object) -> "Scope":
        """Parse a scope string.

        Raises:
            ValueError: If the scope is not recognised

        """
        scope = cls.try_parse(value)
        if scope is None:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unrecognised scope {value!r}. Valid: {valid}")
        return scope


_SCOPE_ALIASES = {
    "js": "javascript",
    "ts": "typescript",
    "rs": "rust",
    "kt": "kotlin",
}


class Severity(StrEnum):
    """How strongly a rule applies."""

    ADVISORY = "advisory"
    REQUIRED = "required"
    DISALLOWED = "disallowed"

    @classmethod
    def try_parse(cls, value: object) -> "Severity | None":
        """Parse a severity string, returning None when it is not recognised."""
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def normalise_category(value: str) -> str:
    """Normalise a category name (``"Error Handling"`` -> ``"error-handling"``)."""
    return _CATEGORY_SEPARATORS.sub("-", value.strip().lower())


class RuleExample(BaseModel):
    """A snippet pair illustrating a rule.

    Attributes:
        good: Snippet that follows the rule
        bad: Snippet that violates the rule
        language: Fence language of the snippets (e.g. "ts")
        note: Optional commentary on the example

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    good: str | None = None
    bad: str | None = None
    language: str | None = None
    note: str | None = None

    @field_validator("good", "bad")
    @classmethod
    def validate_snippet_not_blank(cls, snippet: str | None) -> str | None:
        """Reject snippets that are present but blank."""
        if snippet is not None and not snippet.strip():
            raise ValueError("Example snippets must be non-empty strings")
        return snippet

    @model_validator(mode="after")
    def validate_has_snippet(self) -> "RuleExample":
        """Ensure at least one of good or bad is given."""
        if self.good is None and self.bad is None:
            raise ValueError("Example must have a good or a bad snippet")
        return self


class RuleDefinition(BaseModel):
    """One style rule.

    Rules are immutable values created once at load time. Identity within
    a registry is the ``(scope, id)`` pair exposed as ``key``.

    Attributes:
        id: Identifier, unique within its scope
        scope: Language scope the rule applies to
        category: Normalised category (naming, formatting, ...)
        severity: Advisory, required or disallowed
        rationale: Human-readable explanation of the rule
        title: Optional short display title
        examples: Good/bad snippet pairs
        source: Origin of the rule, usually ``"<document>:<line>"``

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Rule identifier")
    scope: Scope
    category: str = Field(min_length=1)
    severity: Severity
    rationale: str = Field(min_length=1)
    title: str | None = None
    examples: tuple[RuleExample, ...] = ()
    source: str | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        """Strip the id and reject embedded whitespace."""
        value = value.strip()
        if not value:
            raise ValueError("Rule id must not be empty")
        if any(ch.isspace() for ch in value):
            raise ValueError(f"Rule id {value!r} must not contain whitespace")
        return value

    @field_validator("scope", mode="before")
    @classmethod
    def parse_scope(cls, value: Any) -> Scope:  # noqa: ANN401  # Raw input from YAML
        """Accept scope names case-insensitively and by alias."""
        return Scope.parse(value)

    @field_validator("severity", mode="before")
    @classmethod
    def parse_severity(cls, value: Any) -> Any:  # noqa: ANN401  # Raw input from YAML
        """Accept severity names case-insensitively."""
        return Severity.try_parse(value) or value

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str) -> str:
        """Normalise the category name."""
        category = normalise_category(value)
        if not category:
            raise ValueError("Category must not be empty")
        return category

    @field_validator("rationale")
    @classmethod
    def validate_rationale(cls, value: str) -> str:
        """Strip surrounding whitespace and reject blank rationale."""
        value = value.strip()
        if not value:
            raise ValueError("Rationale must not be empty")
        return value

    @property
    def key(self) -> tuple[Scope, str]:
        """Registry key of this rule."""
        return (self.scope, self.id)

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create a rule from a properties dictionary with validation.

        Args:
            properties: Rule fields, typically parsed from a rule document

        Returns:
            Validated rule instance

        Raises:
            RuleValidationError: If any field is missing or invalid

        """
        try:
            return cls.model_validate(properties)
        except ValidationError as e:
            rule_id = properties.get("id") or "<unnamed>"
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'rule'}: {error['msg']}"
                for error in e.errors()
            )
            raise RuleValidationError(f"Invalid rule '{rule_id}': {problems}") from e
