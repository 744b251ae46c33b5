"""Error classes for stylebook.

This module provides:
- StylebookError: Base exception class for all stylebook errors
- RuleValidationError: Malformed rule definition
- RegistryError, DuplicateIdError, RegistryFrozenError: Registry exceptions
- DocumentError, DocumentNotFoundError, DocumentParseError: Loader exceptions
- ConfigurationError: Invalid configuration
- LoggingError: Logging setup failure
"""

from pathlib import Path


class StylebookError(Exception):
    """Base exception for all stylebook errors."""

    pass


class RuleValidationError(StylebookError, ValueError):
    """Raised when a rule definition is malformed."""

    pass


class RegistryError(StylebookError):
    """Base exception for registry-related errors."""

    pass


class DuplicateIdError(RegistryError):
    """Raised when a rule id is already registered within a scope."""

    def __init__(self, scope: str, rule_id: str) -> None:
        """Initialise with the colliding scope and rule id."""
        self.scope = scope
        self.rule_id = rule_id
        super().__init__(f"Rule '{rule_id}' is already registered in scope '{scope}'")


class RegistryFrozenError(RegistryError):
    """Raised when registering into a frozen registry."""

    pass


class DocumentError(StylebookError):
    """Base exception for rule document errors."""

    pass


class DocumentNotFoundError(DocumentError):
    """Raised when a rule document or document directory does not exist."""

    pass


class DocumentParseError(DocumentError):
    """Raised when a rule document cannot be parsed."""

    def __init__(
        self, message: str, path: Path | str | None = None, line: int | None = None
    ) -> None:
        """Initialise with an optional document location."""
        self.path = path
        self.line = line
        location = ""
        if path is not None:
            location = f"{path}:{line}: " if line is not None else f"{path}: "
        super().__init__(f"{location}{message}")


class ConfigurationError(StylebookError):
    """Raised when stylebook configuration is invalid."""

    pass


class LoggingError(StylebookError):
    """Raised when logging configuration fails."""

    pass
