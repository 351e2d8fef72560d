"""Rule-based URL filter for crawlers.

Ordered allow/deny rules, first match wins, with a general regex back-end
and a fast literal back-end that share the same decisions.
"""

from urlfilter.core.config import UrlFilterSettings
from urlfilter.exceptions import (
    MalformedUrlError,
    PatternCompileError,
    RuleSourceError,
    RuleSyntaxError,
    UnsupportedPatternError,
    UrlFilterError,
)
from urlfilter.matchers import MatcherType, get_matcher_factory
from urlfilter.rules import FilterResult, MatchDecision, Rule, RuleLoader, RuleSet
from urlfilter.services import LengthGuardConfig, UrlFilter

__version__ = "0.1.0"

__all__ = [
    "UrlFilter",
    "UrlFilterSettings",
    "LengthGuardConfig",
    "MatcherType",
    "get_matcher_factory",
    "FilterResult",
    "MatchDecision",
    "Rule",
    "RuleLoader",
    "RuleSet",
    "UrlFilterError",
    "RuleSyntaxError",
    "PatternCompileError",
    "UnsupportedPatternError",
    "MalformedUrlError",
    "RuleSourceError",
]
