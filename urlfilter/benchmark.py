"""Throughput benchmark for URL filters.

Drives a UrlFilter over a URL corpus while sweeping the number of rules,
to catch regressions where per-URL cost starts growing with rule count.
Not used on the request path.
"""

from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from urlfilter.core.logging import get_logger
from urlfilter.exceptions import MalformedUrlError
from urlfilter.matchers.factory import MatcherType
from urlfilter.rules.models import Rule
from urlfilter.services.url_filter import UrlFilter

DEFAULT_RULE_COUNTS = (50, 100, 200, 400, 800)


@dataclass
class BenchmarkResult:
    """Timing for one rule count."""
    matcher: str
    rule_count: int
    url_count: int
    loops: int
    elapsed_s: float
    kept: int
    discarded: int
    malformed: int

    @property
    def per_url_us(self) -> float:
        evaluations = self.url_count * self.loops
        if evaluations == 0:
            return 0.0
        return self.elapsed_s / evaluations * 1_000_000


class BenchmarkHarness:
    """Runs a URL corpus through filters built from growing rule prefixes.

    Args:
        rules: Full rule list; the first N rules are used for rule count N
        urls: URL corpus
        matcher: Back-end under test
        default_accept: Default decision for unmatched URLs
        logger: Logger for per-run timings
    """

    def __init__(
        self,
        rules: Sequence[Rule],
        urls: Sequence[str],
        matcher: MatcherType | str = MatcherType.FAST,
        default_accept: bool = True,
        logger: logging.Logger | None = None,
    ):
        self.rules = tuple(rules)
        self.urls = tuple(urls)
        self.matcher = matcher
        self.default_accept = default_accept
        self.logger = logger or get_logger(__name__)

    def build_filter(self, rule_count: int) -> UrlFilter:
        if rule_count > len(self.rules):
            raise ValueError(
                f"rule_count {rule_count} exceeds available rules ({len(self.rules)})"
            )
        return UrlFilter.from_rules(
            self.rules[:rule_count],
            matcher=self.matcher,
            default_accept=self.default_accept,
            logger=self.logger,
        )

    def run(self, rule_count: int, loops: int = 1) -> BenchmarkResult:
        """Time ``loops`` passes over the corpus with the first ``rule_count`` rules."""
        url_filter = self.build_filter(rule_count)
        kept = discarded = malformed = 0

        start = time.perf_counter()
        for _ in range(loops):
            for _url, outcome in url_filter.filter_many(self.urls):
                if isinstance(outcome, MalformedUrlError):
                    malformed += 1
                elif outcome.accepted:
                    kept += 1
                else:
                    discarded += 1
        elapsed = time.perf_counter() - start

        result = BenchmarkResult(
            matcher=url_filter.ruleset.matcher.name,
            rule_count=rule_count,
            url_count=len(self.urls),
            loops=loops,
            elapsed_s=elapsed,
            kept=kept,
            discarded=discarded,
            malformed=malformed,
        )
        self.logger.info(
            "%s matcher, %d rules: %.2f us/url",
            result.matcher,
            rule_count,
            result.per_url_us,
            extra={
                "matcher": result.matcher,
                "rule_count": rule_count,
                "duration_ms": elapsed * 1000,
            },
        )
        return result

    def sweep(
        self,
        rule_counts: Iterable[int] = DEFAULT_RULE_COUNTS,
        loops: int = 1,
    ) -> List[BenchmarkResult]:
        return [self.run(count, loops=loops) for count in rule_counts]


def generate_literal_rules(count: int, seed: int = 0) -> List[Rule]:
    """Generate a mixed fast-subset rule list for benchmarking.

    Rules cycle through substring, prefix, suffix and exact patterns; about
    one in ten is an allow rule.
    """
    rng = random.Random(seed)
    rules: List[Rule] = []
    for ordinal in range(count):
        token = "".join(rng.choices(string.ascii_lowercase, k=rng.randint(4, 9)))
        kind = ordinal % 4
        if kind == 0:
            pattern = f"/{token}/"
        elif kind == 1:
            pattern = f"^https://{token}\\.example\\.com/"
        elif kind == 2:
            pattern = f"\\.{token[:4]}$"
        else:
            pattern = f"^https://example\\.org/{token}$"
        rules.append(
            Rule(
                sign=rng.random() < 0.1,
                pattern=pattern,
                ordinal=ordinal,
                line_number=ordinal + 1,
            )
        )
    return rules


def generate_urls(count: int, seed: int = 0) -> List[str]:
    """Generate a synthetic URL corpus."""
    rng = random.Random(seed)
    hosts = ["example.com", "example.org", "news.example.com", "data.example.gov"]
    urls = []
    for _ in range(count):
        segments = [
            "".join(rng.choices(string.ascii_lowercase, k=rng.randint(3, 8)))
            for _ in range(rng.randint(1, 5))
        ]
        ext = rng.choice(["", ".html", ".xml", ".rss", ".json"])
        query = f"?id={rng.randint(1, 10_000)}" if rng.random() < 0.3 else ""
        urls.append(f"https://{rng.choice(hosts)}/{'/'.join(segments)}{ext}{query}")
    return urls
