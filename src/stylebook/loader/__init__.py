"""Rule document loading."""

from stylebook.loader.documents import (
    discover_documents,
    load_directory,
    load_documents,
)
from stylebook.loader.markdown import MarkdownRuleParser

__all__ = [
    "MarkdownRuleParser",
    "discover_documents",
    "load_directory",
    "load_documents",
]
