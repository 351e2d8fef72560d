"""Rule model and rule text loading."""

from urlfilter.rules.loader import RuleLoader, load_rules, parse_rules, split_scope
from urlfilter.rules.models import FilterResult, MatchDecision, Rule, RuleSet

__all__ = [
    "FilterResult",
    "MatchDecision",
    "Rule",
    "RuleSet",
    "RuleLoader",
    "load_rules",
    "parse_rules",
    "split_scope",
]
