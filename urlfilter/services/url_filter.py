"""UrlFilter: length guard plus ordered rule evaluation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple, Optional, Sequence, Union
from urllib.parse import urlsplit

from urlfilter.core.config import UrlFilterSettings
from urlfilter.core.logging import get_log_context, get_logger
from urlfilter.exceptions import MalformedUrlError
from urlfilter.matchers.factory import MatcherType, get_matcher_factory
from urlfilter.rules.loader import RuleLoader
from urlfilter.rules.models import FilterResult, MatchDecision, Rule, RuleSet
from urlfilter.services.length_guard import LengthGuard, LengthGuardConfig

REASON_RULE = "rule"
REASON_DEFAULT = "default"


class UrlParts(NamedTuple):
    """Pieces of a URL the filter needs."""
    host: str
    path: str
    query: str


def split_url(url: str) -> UrlParts:
    """Decompose a URL into lowercase host, path and query.

    Raises:
        MalformedUrlError: The URL has no scheme, a bad netloc or port,
            or spans several lines
    """
    if "\n" in url or "\r" in url:
        raise MalformedUrlError(url, "URL contains line breaks")
    try:
        parts = urlsplit(url)
        # Accessing port validates it
        _ = parts.port
    except ValueError as e:
        raise MalformedUrlError(url, str(e)) from e
    if not parts.scheme:
        raise MalformedUrlError(url, "missing scheme")
    return UrlParts(host=parts.hostname or "", path=parts.path, query=parts.query)


class UrlFilter:
    """Decides whether a URL is kept or discarded.

    Evaluation order per URL:
    1. Split the URL (malformed URLs raise MalformedUrlError)
    2. Length guard (oversized URLs are discarded without rule evaluation)
    3. Rules in declaration order, first match wins, out-of-scope rules skipped
    4. Default decision if no rule matched

    The filter holds no per-call state, so one instance can serve many
    threads. To change rules, build a new filter and swap the reference.
    """

    def __init__(
        self,
        ruleset: RuleSet,
        length_guard: LengthGuardConfig | None = None,
        default_accept: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.ruleset = ruleset
        self.length_guard = LengthGuard(length_guard)
        self.default_accept = default_accept
        self.logger = logger or get_logger(__name__)
        self._matcher_name = ruleset.matcher.name

    @classmethod
    def from_rules(
        cls,
        rules: Sequence[Rule],
        matcher: MatcherType | str = MatcherType.REGEX,
        regex_dotall: bool = False,
        length_guard: LengthGuardConfig | None = None,
        default_accept: bool = False,
        logger: logging.Logger | None = None,
    ) -> "UrlFilter":
        """Compile parsed rules with the selected back-end."""
        factory = get_matcher_factory(matcher, regex_dotall=regex_dotall, logger=logger)
        return cls(
            factory.compile(rules),
            length_guard=length_guard,
            default_accept=default_accept,
            logger=logger,
        )

    @classmethod
    def from_rules_text(
        cls,
        text: str | None = None,
        path: str | Path | None = None,
        matcher: MatcherType | str = MatcherType.REGEX,
        regex_dotall: bool = False,
        length_guard: LengthGuardConfig | None = None,
        default_accept: bool = False,
        logger: logging.Logger | None = None,
    ) -> "UrlFilter":
        """Load rules from inline text (preferred) or a file and compile them.

        Raises:
            RuleSyntaxError, PatternCompileError, UnsupportedPatternError,
            RuleSourceError: Construction failures, never swallowed
        """
        rules = RuleLoader(logger=logger).load(text=text, path=path)
        return cls.from_rules(
            rules,
            matcher=matcher,
            regex_dotall=regex_dotall,
            length_guard=length_guard,
            default_accept=default_accept,
            logger=logger,
        )

    @classmethod
    def from_settings(
        cls,
        settings: UrlFilterSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> "UrlFilter":
        """Build a filter from UrlFilterSettings (environment by default)."""
        settings = settings or UrlFilterSettings()
        url_filter = cls.from_rules_text(
            text=settings.rules,
            path=settings.rules_file,
            matcher=settings.matcher,
            regex_dotall=settings.regex_dotall,
            length_guard=LengthGuardConfig.from_settings(settings),
            default_accept=settings.default_accept,
            logger=logger,
        )
        url_filter.logger.info(
            "URL filter ready: %d rules, %s matcher, default %s",
            len(url_filter.ruleset),
            settings.matcher,
            "accept" if settings.default_accept else "deny",
            extra={"matcher": settings.matcher, "rule_count": len(url_filter.ruleset)},
        )
        return url_filter

    def evaluate(self, url: str) -> FilterResult:
        """Evaluate a URL and report how the decision was taken.

        Raises:
            MalformedUrlError: The URL cannot be decomposed
        """
        parts = split_url(url)

        rejection = self.length_guard.check(len(url), len(parts.path), len(parts.query))
        if rejection is not None:
            result = FilterResult(accepted=False, decision=MatchDecision.DENIED, reason=rejection)
            self._log_result(url, result)
            return result

        rule = self.ruleset.match(url, parts.host)
        if rule is None:
            result = FilterResult(
                accepted=self.default_accept,
                decision=MatchDecision.NO_RULE_MATCHED,
                reason=REASON_DEFAULT,
            )
        else:
            result = FilterResult(
                accepted=rule.sign, decision=rule.decision, rule=rule, reason=REASON_RULE
            )
        self._log_result(url, result)
        return result

    def filter(self, url: str) -> Optional[str]:
        """Legacy call convention: the URL if kept, None if discarded."""
        return url if self.evaluate(url).accepted else None

    def is_allowed(self, url: str) -> bool:
        return self.evaluate(url).accepted

    def filter_many(
        self, urls: Iterable[str]
    ) -> Iterator[tuple[str, Union[FilterResult, MalformedUrlError]]]:
        """Evaluate a batch of URLs.

        A malformed URL does not stop the batch: its MalformedUrlError is
        yielded in place of a result and the caller decides what to do.
        """
        for url in urls:
            try:
                yield url, self.evaluate(url)
            except MalformedUrlError as e:
                yield url, e

    def _log_result(self, url: str, result: FilterResult) -> None:
        if not self.logger.isEnabledFor(logging.DEBUG):
            return
        self.logger.debug(
            "URL %s (%s)",
            "kept" if result.accepted else "discarded",
            result.reason,
            extra=get_log_context(
                url=url,
                matcher=self._matcher_name,
                rule_ordinal=result.rule.ordinal if result.rule else None,
                rule_line=result.rule.line_number if result.rule else None,
                decision=result.decision.value,
                reason=result.reason,
            ),
        )
