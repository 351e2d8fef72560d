import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from urlfilter.core.logging import get_logger
from urlfilter.rules.models import Rule, RuleSet


class Matcher(ABC):
    """Base class for compiled rule matchers.

    A matcher is built once from an ordered rule list and answers which rule
    matches a URL first. Implementations must not change their match
    structures after construction so a single instance can be shared between
    threads; thread-safe memo caches are allowed.
    """

    name: str = "base"

    @abstractmethod
    def first_match(self, url: str, host: str = "") -> Optional[int]:
        """Find the lowest-ordinal rule matching ``url``.

        Args:
            url: Full URL string
            host: Lowercase URL host, used to skip out-of-scope rules

        Returns:
            Ordinal of the deciding rule, or None if no rule matched
        """
        pass


class MatcherFactory(ABC):
    """Compiles rules into a RuleSet for one matcher back-end.

    Factories carry back-end options (e.g. regex flags) and the logger used
    while compiling; the evaluation loop itself lives in the matcher.
    """

    name: str = "base"

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_logger(__name__)

    @abstractmethod
    def create_matcher(self, rules: Sequence[Rule]) -> Matcher:
        """Compile ``rules`` into a matcher.

        Raises:
            PatternCompileError: A regex pattern does not compile
            UnsupportedPatternError: A pattern is outside the back-end's subset
        """
        pass

    def compile(self, rules: Sequence[Rule]) -> RuleSet:
        """Compile rules into an immutable RuleSet."""
        rules = tuple(rules)
        for expected, rule in enumerate(rules):
            if rule.ordinal != expected:
                raise ValueError(
                    f"rule ordinals must be consecutive from 0, got {rule.ordinal} at {expected}"
                )
        ruleset = RuleSet(rules, self.create_matcher(rules))
        self.logger.debug(
            "Compiled %d rules with %s matcher",
            len(rules),
            self.name,
            extra={"matcher": self.name, "rule_count": len(rules)},
        )
        return ruleset
