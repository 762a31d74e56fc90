"""Ordered store of watch rules."""

import logging
from collections.abc import Iterable, Iterator

from propscript.models import ConfigValidationResult, Rule

logger = logging.getLogger(__name__)


class RuleStore:
    """Ordered list of rules owned by configuration.

    The engine reads rules through :meth:`snapshot`, which returns an
    immutable tuple. Rules are replaced wholesale between processing passes, so
    a pass in progress never observes a half-edited list.
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: tuple[Rule, ...] = tuple(rules)

    def snapshot(self) -> tuple[Rule, ...]:
        return self._rules

    def replace(self, rules: Iterable[Rule]) -> None:
        self._rules = tuple(rules)
        logger.debug(f"Rule store now holds {len(self._rules)} rule(s)")

    def active_rules(self) -> list[Rule]:
        return [rule for rule in self._rules if rule.is_active]

    def watched_properties(self) -> list[str]:
        """Distinct property names watched by active rules, in rule order."""
        return list(dict.fromkeys(rule.property_name for rule in self.active_rules()))

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


def validate_rules(rules: Iterable[Rule]) -> ConfigValidationResult:
    """Check rules for non-fatal configuration problems."""
    rules = list(rules)
    result = ConfigValidationResult(
        rules_loaded=len(rules),
        rules_enabled=sum(1 for rule in rules if rule.is_active),
    )

    for index, rule in enumerate(rules, start=1):
        if not rule.property_name:
            result.warnings.append(f"Rule {index} has no property name and will never fire")
        if not rule.command:
            result.warnings.append(
                f"Rule {index} ('{rule.property_name}') has no command configured"
            )

    if rules and not result.rules_enabled:
        result.warnings.append(
            "No enabled rules: every new file path will be treated as a moved file"
        )

    return result
