"""Matcher back-ends.

- base.py: Matcher and MatcherFactory interfaces
- regex.py: general regular-expression back-end
- fast.py: literal-subset back-end with shared match structures
- factory.py: back-end selection by name
"""

from urlfilter.matchers.base import Matcher, MatcherFactory
from urlfilter.matchers.factory import MatcherType, get_matcher_factory
from urlfilter.matchers.fast import (
    CaseFolder,
    FastMatcher,
    FastMatcherFactory,
    LiteralPattern,
    parse_literal_pattern,
)
from urlfilter.matchers.regex import RegexMatcher, RegexMatcherFactory, RegexPattern

__all__ = [
    "Matcher",
    "MatcherFactory",
    "MatcherType",
    "get_matcher_factory",
    "CaseFolder",
    "FastMatcher",
    "FastMatcherFactory",
    "LiteralPattern",
    "parse_literal_pattern",
    "RegexMatcher",
    "RegexMatcherFactory",
    "RegexPattern",
]
