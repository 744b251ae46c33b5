"""Start-up wiring: configuration to a loaded rule set."""

import logging

from stylebook.configuration import StylebookConfiguration
from stylebook.loader import load_directory
from stylebook.query import RuleQuery
from stylebook.registry import RuleSet

logger = logging.getLogger(__name__)


def build_rule_set(config: StylebookConfiguration | None = None) -> RuleSet:
    """Load the rule set described by a configuration.

    Args:
        config: Configuration to use; defaults to ``StylebookConfiguration.from_env()``

    Returns:
        The loaded rule set, frozen unless the configuration says otherwise

    Raises:
        StylebookError: If any document fails to load; no partial rule set
            is returned

    """
    config = config or StylebookConfiguration.from_env()
    documents_dir = config.resolved_documents_dir
    logger.debug("Loading rule documents from %s (%s)", documents_dir, config.pattern)
    return load_directory(
        documents_dir,
        pattern=config.pattern,
        default_scope=config.default_scope,
        freeze=config.freeze,
    )


def build_query(config: StylebookConfiguration | None = None) -> RuleQuery:
    """Load the configured rule set and wrap it in the query facade."""
    return RuleQuery(build_rule_set(config))
