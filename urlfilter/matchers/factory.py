"""Matcher factory selection.

Maps the configured back-end name to a factory class, the same way for
settings-driven and programmatic construction.
"""

import logging
from enum import Enum
from typing import Dict, Type

from urlfilter.matchers.base import MatcherFactory
from urlfilter.matchers.fast import FastMatcherFactory
from urlfilter.matchers.regex import RegexMatcherFactory


class MatcherType(str, Enum):
    """Supported matcher back-ends."""
    REGEX = "regex"
    FAST = "fast"


_MATCHER_REGISTRY: Dict[MatcherType, Type[MatcherFactory]] = {
    MatcherType.REGEX: RegexMatcherFactory,
    MatcherType.FAST: FastMatcherFactory,
}


def get_matcher_factory(
    matcher: MatcherType | str = MatcherType.REGEX,
    regex_dotall: bool = False,
    logger: logging.Logger | None = None,
) -> MatcherFactory:
    """Create a matcher factory by back-end name.

    Args:
        matcher: "regex" or "fast"
        regex_dotall: Passed to the regex back-end only
        logger: Logger injected into the factory

    Returns:
        MatcherFactory instance

    Raises:
        ValueError: Unknown back-end name
    """
    if not isinstance(matcher, MatcherType):
        try:
            matcher = MatcherType(str(matcher).strip().lower())
        except ValueError:
            available = ", ".join(t.value for t in MatcherType)
            raise ValueError(f"Unknown matcher {matcher!r}. Available: {available}") from None

    factory_cls = _MATCHER_REGISTRY[matcher]
    if factory_cls is RegexMatcherFactory:
        return RegexMatcherFactory(dotall=regex_dotall, logger=logger)
    return factory_cls(logger=logger)
