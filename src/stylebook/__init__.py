"""Stylebook - a registry of coding-style rules loaded from Markdown guides."""

__version__ = "0.1.0"

from stylebook.bootstrap import build_query, build_rule_set
from stylebook.configuration import StylebookConfiguration
from stylebook.errors import (
    ConfigurationError,
    DocumentError,
    DocumentNotFoundError,
    DocumentParseError,
    DuplicateIdError,
    LoggingError,
    RegistryError,
    RegistryFrozenError,
    RuleValidationError,
    StylebookError,
)
from stylebook.loader import (
    MarkdownRuleParser,
    discover_documents,
    load_directory,
    load_documents,
)
from stylebook.query import RuleQuery
from stylebook.registry import RuleSelection, RuleSet
from stylebook.types import RuleDefinition, RuleExample, Scope, Severity

__all__ = [
    # Version
    "__version__",
    # Rule types
    "RuleDefinition",
    "RuleExample",
    "Scope",
    "Severity",
    # Registry and queries
    "RuleQuery",
    "RuleSelection",
    "RuleSet",
    # Loading
    "MarkdownRuleParser",
    "StylebookConfiguration",
    "build_query",
    "build_rule_set",
    "discover_documents",
    "load_directory",
    "load_documents",
    # Errors
    "ConfigurationError",
    "DocumentError",
    "DocumentNotFoundError",
    "DocumentParseError",
    "DuplicateIdError",
    "LoggingError",
    "RegistryError",
    "RegistryFrozenError",
    "RuleValidationError",
    "StylebookError",
]
