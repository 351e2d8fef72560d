"""General-purpose matcher backed by Python's ``re`` module."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from urlfilter.exceptions import PatternCompileError
from urlfilter.matchers.base import Matcher, MatcherFactory
from urlfilter.rules.models import Rule


@dataclass(frozen=True)
class RegexPattern:
    """A rule pattern compiled with ``re``."""
    compiled: re.Pattern

    def matches(self, url: str) -> bool:
        """Search ``url`` for the pattern, unanchored."""
        return self.compiled.search(url) is not None


class RegexMatcher(Matcher):
    """Scans rules in order with compiled regular expressions.

    Patterns are searched, not matched: a rule hits when its pattern occurs
    anywhere in the URL. Authors anchor explicitly with ``^`` and ``$``.
    Cost grows with the number of rules, which is what the fast matcher
    avoids for large rule sets.
    """

    name = "regex"

    def __init__(self, rules: Sequence[Rule], dotall: bool = False):
        flags = re.DOTALL if dotall else 0
        compiled = []
        for rule in rules:
            try:
                compiled.append((rule, RegexPattern(re.compile(rule.pattern, flags))))
            except re.error as e:
                raise PatternCompileError(rule.line_number, rule.pattern, str(e)) from e
        self._compiled: tuple[tuple[Rule, RegexPattern], ...] = tuple(compiled)

    @property
    def patterns(self) -> tuple[RegexPattern, ...]:
        return tuple(pattern for _, pattern in self._compiled)

    def first_match(self, url: str, host: str = "") -> Optional[int]:
        for rule, pattern in self._compiled:
            if rule.scope is not None and not rule.applies_to(host):
                continue
            if pattern.matches(url):
                return rule.ordinal
        return None


class RegexMatcherFactory(MatcherFactory):
    """Factory for regex matchers.

    Args:
        dotall: Compile with re.DOTALL so "." also matches newlines
        logger: Logger for compile diagnostics
    """

    name = "regex"

    def __init__(self, dotall: bool = False, logger: logging.Logger | None = None):
        super().__init__(logger=logger)
        self.dotall = dotall

    def create_matcher(self, rules: Sequence[Rule]) -> RegexMatcher:
        return RegexMatcher(rules, dotall=self.dotall)
