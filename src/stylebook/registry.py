"""Rule registry keyed by scope."""

import logging
import threading
from collections.abc import Callable, Iterable, Iterator

from stylebook.errors import DuplicateIdError, RegistryFrozenError
from stylebook.types import RuleDefinition, Scope, normalise_category

logger = logging.getLogger(__name__)


class RuleSelection:
    """Lazy, restartable view over the rules matching a filter.

    Every iteration re-runs the filter against the owning registry's
    rules in insertion order, so a selection can be iterated any number
    of times.
    """

    def __init__(
        self,
        source: Callable[[], Iterable[RuleDefinition]],
        predicate: Callable[[RuleDefinition], bool],
    ) -> None:
        """Initialise the selection.

        Args:
            source: Callable returning the rules to filter
            predicate: Returns True for rules that belong in the selection

        """
        self._source = source
        self._predicate = predicate

    def __iter__(self) -> Iterator[RuleDefinition]:
        """Iterate over matching rules."""
        return (rule for rule in self._source() if self._predicate(rule))

    def __len__(self) -> int:
        """Count matching rules."""
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        """Return True if at least one rule matches."""
        return self.first() is not None

    def __repr__(self) -> str:
        """Return a debug representation listing matching rule ids."""
        return f"RuleSelection({[rule.id for rule in self]!r})"

    def first(self) -> RuleDefinition | None:
        """Return the first matching rule, or None."""
        return next(iter(self), None)


class RuleSet:
    """Registry of rule definitions grouped by scope.

    Rule ids are unique within a scope; the same id may appear in several
    scopes. Insertion order is preserved across all queries. The registry
    is built once at start-up and then frozen, after which it is safe for
    unsynchronised concurrent reads.
    """

    def __init__(self, rules: Iterable[RuleDefinition] = ()) -> None:
        """Initialise the registry, optionally registering rules atomically."""
        self._lock = threading.Lock()
        self._rules: list[RuleDefinition] = []
        self._by_key: dict[tuple[Scope, str], RuleDefinition] = {}
        self._frozen = False
        rules = tuple(rules)
        if rules:
            self.register_all(rules)

    def register(self, rule: RuleDefinition) -> None:
        """Register a single rule.

        Args:
            rule: The rule to add

        Raises:
            DuplicateIdError: If the rule id is already registered in its scope
            RegistryFrozenError: If the registry has been frozen

        """
        self.register_all((rule,))

    def register_all(self, rules: Iterable[RuleDefinition]) -> None:
        """Register a batch of rules, all or nothing.

        Every rule is checked against the registry and against the rest of
        the batch before any is added, so a failed call leaves the
        registry unchanged.

        Raises:
            DuplicateIdError: If any rule collides with a registered rule or
                with an earlier rule in the batch
            RegistryFrozenError: If the registry has been frozen

        """
        batch = tuple(rules)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    "Rule set is frozen; rules can only be registered during loading"
                )

            seen: set[tuple[Scope, str]] = set()
            for rule in batch:
                if rule.key in self._by_key or rule.key in seen:
                    raise DuplicateIdError(rule.scope.value, rule.id)
                seen.add(rule.key)

            for rule in batch:
                self._rules.append(rule)
                self._by_key[rule.key] = rule
                logger.debug("Registered rule '%s' in scope '%s'", rule.id, rule.scope)

    def freeze(self) -> None:
        """Make the registry read-only."""
        with self._lock:
            self._frozen = True
        logger.debug("Rule set frozen with %d rules", len(self._rules))

    @property
    def is_frozen(self) -> bool:
        """Whether the registry rejects further registration."""
        return self._frozen

    def rules_for(
        self, scope: Scope | str, category: str | None = None
    ) -> RuleSelection:
        """Select the rules for a scope, optionally narrowed to a category.

        Args:
            scope: Scope or scope name; unrecognised names match nothing
            category: Optional category, normalised before matching

        Returns:
            Lazy selection in insertion order (empty if nothing matches)

        """
        resolved = Scope.try_parse(scope)
        if resolved is None:
            return RuleSelection(self._snapshot, lambda rule: False)

        wanted = normalise_category(category) if category is not None else None
        return RuleSelection(
            self._snapshot,
            lambda rule: rule.scope is resolved
            and (wanted is None or rule.category == wanted),
        )

    def all(self) -> tuple[RuleDefinition, ...]:
        """Return every registered rule in insertion order."""
        return self._snapshot()

    def get(self, scope: Scope | str, rule_id: str) -> RuleDefinition | None:
        """Look up one rule by scope and id."""
        resolved = Scope.try_parse(scope)
        if resolved is None:
            return None
        return self._by_key.get((resolved, rule_id))

    def scopes(self) -> tuple[Scope, ...]:
        """Return scopes with at least one rule, in first-registration order."""
        return tuple(dict.fromkeys(rule.scope for rule in self._snapshot()))

    def categories(self, scope: Scope | str | None = None) -> tuple[str, ...]:
        """Return distinct categories in first-seen order.

        Args:
            scope: Optional scope to restrict to; unrecognised names give ()

        """
        rules: Iterable[RuleDefinition] = (
            self._snapshot() if scope is None else self.rules_for(scope)
        )
        return tuple(dict.fromkeys(rule.category for rule in rules))

    def _snapshot(self) -> tuple[RuleDefinition, ...]:
        if self._frozen:
            return tuple(self._rules)
        with self._lock:
            return tuple(self._rules)

    def __len__(self) -> int:
        """Return the number of registered rules."""
        return len(self._rules)

    def __iter__(self) -> Iterator[RuleDefinition]:
        """Iterate over all rules in insertion order."""
        return iter(self._snapshot())

    def __contains__(self, item: object) -> bool:
        """Check membership by rule or by ``(scope, id)`` key."""
        if isinstance(item, RuleDefinition):
            return self._by_key.get(item.key) == item
        if isinstance(item, tuple) and len(item) == 2:
            scope, rule_id = item
            return isinstance(rule_id, str) and self.get(scope, rule_id) is not None
        return False
