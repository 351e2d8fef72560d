"""Rule models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Sequence

if TYPE_CHECKING:
    from urlfilter.matchers.base import Matcher


class MatchDecision(str, Enum):
    """Outcome of evaluating a URL against a rule set."""
    ALLOWED = "allowed"
    DENIED = "denied"
    NO_RULE_MATCHED = "no_rule_matched"


@dataclass(frozen=True)
class Rule:
    """One signed pattern in declaration order.

    Attributes:
        sign: True keeps matching URLs, False discards them
        pattern: Pattern text as written after the sign and scope prefix
        scope: Host or domain the rule is restricted to, lowercase
        ordinal: Position among the rules of the source, starting at 0
        line_number: 1-based line in the rule source
    """
    sign: bool
    pattern: str
    scope: Optional[str] = None
    ordinal: int = 0
    line_number: int = 0

    @property
    def decision(self) -> MatchDecision:
        return MatchDecision.ALLOWED if self.sign else MatchDecision.DENIED

    def applies_to(self, host: str) -> bool:
        """Check whether the rule's scope covers ``host``.

        Unscoped rules apply everywhere. A scoped rule applies to the scope
        host itself and to any of its subdomains.
        """
        if self.scope is None:
            return True
        return host == self.scope or host.endswith("." + self.scope)

    def __str__(self) -> str:
        sign = "+" if self.sign else "-"
        scope = f"{self.scope}:" if self.scope else ""
        return f"{sign}{scope}{self.pattern}"


@dataclass
class FilterResult:
    """Full outcome of one URL filter evaluation."""
    accepted: bool
    decision: MatchDecision
    rule: Optional[Rule] = None
    reason: str = "rule"


class RuleSet:
    """Ordered, immutable collection of rules bound to a compiled matcher.

    Built once by a matcher factory and never changed afterwards; a new rule
    configuration means a new RuleSet.
    """

    __slots__ = ("_rules", "_matcher")

    def __init__(self, rules: Sequence[Rule], matcher: "Matcher"):
        self._rules = tuple(rules)
        self._matcher = matcher

    @property
    def matcher(self) -> "Matcher":
        return self._matcher

    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def match(self, url: str, host: str = "") -> Optional[Rule]:
        """Return the first rule in declaration order matching ``url``.

        Args:
            url: Full URL string
            host: Lowercase host of the URL, used for scoped rules

        Returns:
            The deciding Rule, or None if no rule matched
        """
        ordinal = self._matcher.first_match(url, host)
        if ordinal is None:
            return None
        return self._rules[ordinal]

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet(rules={len(self._rules)}, matcher={self._matcher.name!r})"
