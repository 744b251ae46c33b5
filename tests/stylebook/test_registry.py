"""Unit tests for RuleSet and RuleSelection."""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

import pytest

from stylebook import (
    DuplicateIdError,
    RegistryFrozenError,
    RuleDefinition,
    RuleSelection,
    RuleSet,
    Scope,
)


class TestRuleSetRegistration:
    """Test cases for registering rules."""

    def test_registered_rule_is_returned_exactly_once(self, rule_set: RuleSet, make_rule) -> None:
        """Test that register followed by rules_for yields the rule once."""
        rule = make_rule(id="no-var", scope="typescript", category="variables", severity="disallowed")

        rule_set.register(rule)

        assert list(rule_set.rules_for("typescript")) == [rule]
        assert list(rule_set.rules_for("rust")) == []

    def test_duplicate_id_in_same_scope_is_rejected(self, rule_set: RuleSet, make_rule) -> None:
        """Test that a second rule with the same id and scope fails."""
        rule_set.register(make_rule(id="r1", scope="sql"))

        with pytest.raises(DuplicateIdError, match="'r1' is already registered in scope 'sql'") as exc_info:
            rule_set.register(make_rule(id="r1", scope="sql", rationale="Different text"))

        assert exc_info.value.scope == "sql"
        assert exc_info.value.rule_id == "r1"
        assert len(rule_set.rules_for("sql")) == 1
        assert rule_set.rules_for("sql").first().rationale == "Test rule for unit tests"

    def test_same_id_in_different_scopes_is_allowed(self, rule_set: RuleSet, make_rule) -> None:
        """Test that ids only need to be unique within a scope."""
        rule_set.register(make_rule(id="no-var", scope="typescript"))
        rule_set.register(make_rule(id="no-var", scope="javascript"))

        assert len(rule_set) == 2

    def test_register_all_is_atomic_on_duplicate_within_batch(self, rule_set: RuleSet, make_rule) -> None:
        """Test that a batch with an internal duplicate registers nothing."""
        batch = [
            make_rule(id="a", scope="rust"),
            make_rule(id="b", scope="rust"),
            make_rule(id="a", scope="rust"),
        ]

        with pytest.raises(DuplicateIdError):
            rule_set.register_all(batch)

        assert len(rule_set) == 0

    def test_register_all_is_atomic_on_collision_with_existing(self, rule_set: RuleSet, make_rule) -> None:
        """Test that a batch colliding with a registered rule registers nothing."""
        rule_set.register(make_rule(id="b", scope="rust"))

        with pytest.raises(DuplicateIdError):
            rule_set.register_all([make_rule(id="a", scope="rust"), make_rule(id="b", scope="rust")])

        assert [rule.id for rule in rule_set.all()] == ["b"]

    def test_constructor_registers_rules(self, make_rule) -> None:
        """Test that rules passed to the constructor are registered in order."""
        rules = RuleSet([make_rule(id="a"), make_rule(id="b")])

        assert [rule.id for rule in rules] == ["a", "b"]

    def test_frozen_rule_set_rejects_registration(self, rule_set: RuleSet, make_rule) -> None:
        """Test that freeze() makes the registry read-only."""
        rule_set.register(make_rule(id="a"))
        rule_set.freeze()

        with pytest.raises(RegistryFrozenError):
            rule_set.register(make_rule(id="b"))

        assert rule_set.is_frozen
        assert len(rule_set) == 1

    def test_concurrent_registration_keeps_every_rule(self, rule_set: RuleSet, make_rule) -> None:
        """Test that registration from many threads loses no rules."""
        num_threads = 20
        barrier = threading.Barrier(num_threads)
        rules = [make_rule(id=f"rule-{i}") for i in range(num_threads)]

        def register(rule: RuleDefinition) -> None:
            barrier.wait()
            rule_set.register(rule)

        with ThreadPoolExecutor(max_workers=num_threads) as executor:
            futures = [executor.submit(register, rule) for rule in rules]
            for future in as_completed(futures):
                future.result()

        assert len(rule_set) == num_threads
        assert {rule.id for rule in rule_set} == {rule.id for rule in rules}


class TestRuleSetQueries:
    """Test cases for reading from a rule set."""

    def test_rules_for_unknown_scope_is_empty(self, populated_rule_set: RuleSet) -> None:
        """Test that unrecognised and empty scopes give empty selections."""
        assert list(populated_rule_set.rules_for("cobol")) == []
        assert list(populated_rule_set.rules_for("swift")) == []
        assert not populated_rule_set.rules_for("cobol")

    def test_rules_for_filters_by_category(self, populated_rule_set: RuleSet) -> None:
        """Test that the category narrows the selection."""
        selection = populated_rule_set.rules_for("typescript", category="variables")

        assert [rule.id for rule in selection] == ["no-var"]

    def test_rules_for_normalises_category(self, populated_rule_set: RuleSet) -> None:
        """Test that category matching ignores case."""
        selection = populated_rule_set.rules_for("typescript", category="Naming")

        assert [rule.id for rule in selection] == ["interface-naming"]

    def test_rules_for_accepts_scope_enum_and_alias(self, populated_rule_set: RuleSet) -> None:
        """Test that scope lookups accept enum members and aliases."""
        by_enum = [rule.id for rule in populated_rule_set.rules_for(Scope.TYPESCRIPT)]
        by_alias = [rule.id for rule in populated_rule_set.rules_for("ts")]

        assert by_enum == by_alias == ["no-var", "no-explicit-any", "interface-naming"]

    def test_all_preserves_insertion_order_across_calls(self, populated_rule_set: RuleSet) -> None:
        """Test that all() is stable and ordered."""
        first = populated_rule_set.all()
        second = populated_rule_set.all()

        assert first == second
        assert [rule.id for rule in first] == [
            "no-var",
            "no-explicit-any",
            "interface-naming",
            "no-var",
            "snake-case-items",
            "uppercase-keywords",
        ]

    def test_get_returns_rule_or_none(self, populated_rule_set: RuleSet) -> None:
        """Test lookup by scope and id."""
        rule = populated_rule_set.get("rust", "snake-case-items")

        assert rule is not None
        assert rule.scope is Scope.RUST
        assert populated_rule_set.get("rust", "no-var") is None
        assert populated_rule_set.get("cobol", "no-var") is None

    def test_scopes_in_first_registration_order(self, populated_rule_set: RuleSet) -> None:
        """Test that scopes() lists populated scopes only."""
        assert populated_rule_set.scopes() == (
            Scope.TYPESCRIPT,
            Scope.JAVASCRIPT,
            Scope.RUST,
            Scope.SQL,
        )

    def test_categories(self, populated_rule_set: RuleSet) -> None:
        """Test distinct categories overall and per scope."""
        assert populated_rule_set.categories("typescript") == ("variables", "types", "naming")
        assert populated_rule_set.categories() == ("variables", "types", "naming", "formatting")
        assert populated_rule_set.categories("cobol") == ()

    def test_contains_by_rule_and_key(self, populated_rule_set: RuleSet, make_rule) -> None:
        """Test membership checks."""
        registered = populated_rule_set.get("sql", "uppercase-keywords")

        assert registered in populated_rule_set
        assert ("sql", "uppercase-keywords") in populated_rule_set
        assert ("sql", "missing") not in populated_rule_set
        assert make_rule(id="uppercase-keywords", scope="sql", rationale="other") not in populated_rule_set
        assert "uppercase-keywords" not in populated_rule_set


class TestRuleSelection:
    """Test cases for the lazy RuleSelection."""

    def test_selection_is_restartable(self, populated_rule_set: RuleSet) -> None:
        """Test that a selection can be iterated repeatedly."""
        selection = populated_rule_set.rules_for("typescript")

        assert list(selection) == list(selection)
        assert len(selection) == 3

    def test_selection_is_lazy(self, rule_set: RuleSet, make_rule) -> None:
        """Test that a selection reflects rules registered after it was created."""
        selection = rule_set.rules_for("kotlin")
        assert len(selection) == 0

        rule_set.register(make_rule(id="prefer-val", scope="kotlin"))

        assert [rule.id for rule in selection] == ["prefer-val"]

    def test_first_and_bool(self, populated_rule_set: RuleSet) -> None:
        """Test first() and truthiness."""
        selection = populated_rule_set.rules_for("rust")

        assert selection
        assert selection.first() is populated_rule_set.get("rust", "snake-case-items")
        assert populated_rule_set.rules_for("swift").first() is None

    def test_selection_is_a_rule_selection(self, populated_rule_set: RuleSet) -> None:
        """Test the returned type and its repr."""
        selection = populated_rule_set.rules_for("sql")

        assert isinstance(selection, RuleSelection)
        assert repr(selection) == "RuleSelection(['uppercase-keywords'])"
