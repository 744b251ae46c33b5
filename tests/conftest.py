"""Pytest configuration for stylebook tests.

This module provides fixtures shared across the stylebook test suite.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeAlias

import pytest

from stylebook import RuleDefinition, RuleSet

RuleFactory: TypeAlias = Callable[..., RuleDefinition]
DocumentWriter: TypeAlias = Callable[[str, str], Path]


@pytest.fixture
def make_rule() -> RuleFactory:
    """Provide a factory for valid rules with overridable fields.

    Usage:
        def test_something(make_rule):
            rule = make_rule(id="no-var", scope="typescript")

    """

    def factory(**overrides: Any) -> RuleDefinition:
        properties: dict[str, Any] = {
            "id": "test-rule",
            "scope": "general",
            "category": "naming",
            "severity": "required",
            "rationale": "Test rule for unit tests",
        }
        properties.update(overrides)
        return RuleDefinition.from_properties(properties)

    return factory


@pytest.fixture
def rule_set() -> RuleSet:
    """Provide an empty, unfrozen rule set."""
    return RuleSet()


@pytest.fixture
def populated_rule_set(make_rule: RuleFactory) -> RuleSet:
    """Provide a frozen rule set spanning several scopes and categories."""
    rules = RuleSet(
        [
            make_rule(id="no-var", scope="typescript", category="variables", severity="disallowed"),
            make_rule(id="no-explicit-any", scope="typescript", category="types", severity="disallowed"),
            make_rule(id="interface-naming", scope="typescript", category="naming", severity="advisory"),
            make_rule(id="no-var", scope="javascript", category="variables", severity="disallowed"),
            make_rule(id="snake-case-items", scope="rust", category="naming", severity="required"),
            make_rule(id="uppercase-keywords", scope="sql", category="formatting", severity="required"),
        ]
    )
    rules.freeze()
    return rules


@pytest.fixture
def write_document(tmp_path: Path) -> DocumentWriter:
    """Provide a helper that writes a rule document under tmp_path.

    Usage:
        def test_something(write_document):
            path = write_document("rust.md", "## rule-id\\n...")

    """

    def writer(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return writer
