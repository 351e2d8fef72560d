"""Command-line driver.

Reads URLs from stdin, one per line, and prints ``+url`` for kept URLs and
``-url`` for discarded ones. Options override URLFILTER_* environment
settings.

    python -m urlfilter --rules-file rules.txt --matcher fast < urls.txt
    python -m urlfilter --benchmark --matcher fast
"""

import argparse
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from urlfilter.benchmark import (
    DEFAULT_RULE_COUNTS,
    BenchmarkHarness,
    generate_literal_rules,
    generate_urls,
)
from urlfilter.core.config import UrlFilterSettings
from urlfilter.core.logging import get_logger, setup_logging
from urlfilter.exceptions import MalformedUrlError, UrlFilterError
from urlfilter.services.url_filter import UrlFilter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="urlfilter",
        description="Filter URLs from stdin with allow/deny rules",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--rules", help="inline rule text (takes precedence over files)")
    source.add_argument("--rules-file", help="path to a rule file")
    parser.add_argument("--matcher", choices=["regex", "fast"], help="matcher back-end")
    parser.add_argument("--max-url-length", type=int)
    parser.add_argument("--max-path-length", type=int)
    parser.add_argument("--max-query-length", type=int)
    parser.add_argument(
        "--default-accept",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="keep URLs no rule matches (default: discard)",
    )
    parser.add_argument("--log-level", help="log level (default: INFO)")
    parser.add_argument(
        "--benchmark",
        action="store_true",
        help="time synthetic rule sets of growing size instead of filtering stdin",
    )
    parser.add_argument("--loops", type=int, default=3, help="benchmark passes per rule count")
    return parser


def load_settings(args: argparse.Namespace) -> UrlFilterSettings:
    overrides = {
        "rules": args.rules,
        "rules_file": args.rules_file,
        "matcher": args.matcher,
        "max_url_length": args.max_url_length,
        "max_path_length": args.max_path_length,
        "max_query_length": args.max_query_length,
        "default_accept": args.default_accept,
        "log_level": args.log_level,
    }
    # Keyword arguments win over environment variables
    settings = {k: v for k, v in overrides.items() if v is not None}
    # A rule source given on the command line replaces both sources from the environment
    if args.rules_file is not None:
        settings["rules"] = None
    elif args.rules is not None:
        settings["rules_file"] = None
    return UrlFilterSettings(**settings)


def run_benchmark(settings: UrlFilterSettings, loops: int) -> None:
    rules = generate_literal_rules(max(DEFAULT_RULE_COUNTS))
    urls = generate_urls(2000)
    harness = BenchmarkHarness(
        rules, urls, matcher=settings.matcher, logger=get_logger("urlfilter.benchmark")
    )
    for result in harness.sweep(loops=loops):
        print(f"{result.matcher}\t{result.rule_count}\t{result.per_url_us:.2f} us/url")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.exit(2, f"urlfilter: error: invalid settings:\n{e}\n")

    setup_logging(settings)
    logger = get_logger("urlfilter.cli")

    if args.benchmark:
        run_benchmark(settings, args.loops)
        return 0

    try:
        url_filter = UrlFilter.from_settings(settings, logger=logger)
    except UrlFilterError as e:
        parser.exit(2, f"urlfilter: error: {e}\n")

    for line in sys.stdin:
        url = line.strip()
        if not url:
            continue
        try:
            kept = url_filter.is_allowed(url)
        except MalformedUrlError as e:
            logger.warning("Skipping malformed URL: %s", e, extra={"url": url})
            kept = False
        print(f"{'+' if kept else '-'}{url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
