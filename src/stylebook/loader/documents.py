"""Loading rule documents from disk into a rule set."""

import logging
from collections.abc import Iterable
from pathlib import Path

from stylebook.errors import DocumentNotFoundError
from stylebook.loader.markdown import MarkdownRuleParser
from stylebook.registry import RuleSet
from stylebook.types import RuleDefinition, Scope

logger = logging.getLogger(__name__)


def discover_documents(directory: Path | str, pattern: str = "*.md") -> list[Path]:
    """Find rule documents in a directory.

    Args:
        directory: Directory to search
        pattern: Glob pattern relative to the directory (``**/*.md`` recurses)

    Returns:
        Matching files sorted by path

    Raises:
        DocumentNotFoundError: If the directory does not exist

    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DocumentNotFoundError(f"Rule document directory not found: {directory}")
    return sorted(path for path in directory.glob(pattern) if path.is_file())


def load_documents(
    paths: Iterable[Path | str],
    default_scope: Scope | str | None = None,
    freeze: bool = True,
) -> RuleSet:
    """Load rule documents into a new rule set.

    Loading is all-or-nothing: every document is parsed before any rule is
    registered, and the rules are registered as one batch. Any failure
    propagates and no rule set is returned.

    Args:
        paths: Rule documents to load, in order
        default_scope: Scope for rules whose document does not name one
        freeze: Whether to freeze the rule set after loading

    Returns:
        The populated rule set

    Raises:
        DocumentNotFoundError: If a document does not exist
        DocumentParseError: If a document is malformed
        DuplicateIdError: If two rules share an id within a scope

    """
    parser = MarkdownRuleParser(default_scope=default_scope)
    rules: list[RuleDefinition] = []
    documents = 0
    for path in paths:
        rules.extend(parser.parse_file(path))
        documents += 1

    rule_set = RuleSet()
    rule_set.register_all(rules)
    if freeze:
        rule_set.freeze()

    logger.info("Loaded %d rules from %d documents", len(rule_set), documents)
    return rule_set


def load_directory(
    directory: Path | str,
    pattern: str = "*.md",
    default_scope: Scope | str | None = None,
    freeze: bool = True,
) -> RuleSet:
    """Discover and load every rule document in a directory."""
    paths = discover_documents(directory, pattern)
    if not paths:
        logger.warning("No rule documents matching '%s' in %s", pattern, directory)
    return load_documents(paths, default_scope=default_scope, freeze=freeze)
