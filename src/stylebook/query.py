"""Read-only query facade over a rule set.

Intended for consumers such as documentation sites or lint-config
generators. No method raises for unknown scopes, categories or
severities; they simply match nothing.
"""

from typing import Any

from stylebook.registry import RuleSet
from stylebook.types import RuleDefinition, Severity


class RuleQuery:
    """Query API for a loaded rule set."""

    def __init__(self, rule_set: RuleSet) -> None:
        """Initialise the facade over an already loaded rule set."""
        self._rule_set = rule_set

    def rules_for(
        self, scope: str, category: str | None = None
    ) -> tuple[RuleDefinition, ...]:
        """Return rules for a scope, optionally narrowed to a category.

        Unknown scopes and categories yield an empty tuple.
        """
        return tuple(self._rule_set.rules_for(scope, category))

    def rules_by_severity(
        self, severity: str, scope: str | None = None
    ) -> tuple[RuleDefinition, ...]:
        """Return rules with the given severity, optionally within one scope."""
        resolved = Severity.try_parse(severity)
        if resolved is None:
            return ()
        rules = self._rule_set.all() if scope is None else self.rules_for(scope)
        return tuple(rule for rule in rules if rule.severity is resolved)

    def find(self, rule_id: str, scope: str | None = None) -> tuple[RuleDefinition, ...]:
        """Return every rule with the given id, optionally within one scope."""
        if scope is not None:
            rule = self._rule_set.get(scope, rule_id)
            return (rule,) if rule is not None else ()
        return tuple(rule for rule in self._rule_set.all() if rule.id == rule_id)

    def scopes(self) -> tuple[str, ...]:
        """Return the names of scopes that have rules."""
        return tuple(scope.value for scope in self._rule_set.scopes())

    def categories(self, scope: str | None = None) -> tuple[str, ...]:
        """Return the categories in use, optionally within one scope."""
        return self._rule_set.categories(scope)

    def summary(self) -> dict[str, dict[str, int]]:
        """Count rules per scope and severity.

        Returns:
            Mapping of scope name to ``{severity: count}``, with every
            severity present for each scope that has rules.

        """
        counts: dict[str, dict[str, int]] = {}
        for rule in self._rule_set.all():
            per_scope = counts.setdefault(
                rule.scope.value, {severity.value: 0 for severity in Severity}
            )
            per_scope[rule.severity.value] += 1
        return counts

    def export(self, scope: str | None = None) -> list[dict[str, Any]]:
        """Export rules as JSON-ready dictionaries.

        Args:
            scope: Optional scope to restrict the export to

        """
        rules = self._rule_set.all() if scope is None else self.rules_for(scope)
        return [rule.model_dump(mode="json", exclude_none=True) for rule in rules]
