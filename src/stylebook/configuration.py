"""Configuration for loading a stylebook.

Configuration objects are immutable pydantic models. They are created
either from a properties dictionary or from the environment, with explicit
properties taking precedence over environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stylebook.errors import ConfigurationError
from stylebook.types import Scope

GUIDES_DIR = Path(__file__).parent / "guides"

# Environment variables read by from_env(), keyed by field name
ENVIRONMENT_VARIABLES = {
    "documents_dir": "STYLEBOOK_DOCUMENTS_DIR",
    "pattern": "STYLEBOOK_PATTERN",
    "default_scope": "STYLEBOOK_DEFAULT_SCOPE",
}


class StylebookConfiguration(BaseModel):
    """Where rule documents live and how to load them.

    Attributes:
        documents_dir: Directory of rule documents; None uses the bundled guides
        pattern: Glob pattern selecting documents within the directory
        default_scope: Scope for rules whose document does not name one
        freeze: Whether the loaded rule set is frozen

    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
    )

    documents_dir: Path | None = None
    pattern: str = Field(default="*.md", min_length=1)
    default_scope: Scope | None = None
    freeze: bool = True

    @field_validator("default_scope", mode="before")
    @classmethod
    def parse_default_scope(cls, value: Any) -> Scope | None:  # noqa: ANN401  # Raw property value
        """Accept scope names case-insensitively and by alias."""
        if value is None or value == "":
            return None
        return Scope.parse(value)

    @property
    def resolved_documents_dir(self) -> Path:
        """Directory to load documents from."""
        return self.documents_dir if self.documents_dir is not None else GUIDES_DIR

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from a properties dictionary with validation.

        Raises:
            ConfigurationError: If properties are invalid

        """
        try:
            return cls.model_validate(properties)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid stylebook configuration: {e}") from e

    @classmethod
    def from_env(cls, properties: dict[str, Any] | None = None) -> Self:
        """Create configuration from properties, falling back to the environment.

        Args:
            properties: Explicit properties; these override environment values

        Raises:
            ConfigurationError: If the resulting configuration is invalid

        """
        merged: dict[str, Any] = {}
        for field_name, variable in ENVIRONMENT_VARIABLES.items():
            value = os.getenv(variable)
            if value:
                merged[field_name] = value
        merged.update(properties or {})
        return cls.from_properties(merged)
