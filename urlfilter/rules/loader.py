"""Rule text parsing.

Grammar, one rule per line::

    # comment
    +pattern                 keep URLs matching pattern
    -pattern                 discard URLs matching pattern
    +example.org:pattern     same, only for example.org and its subdomains
    >example.org             following rules are scoped to example.org
    <                        end of the scope block

Blank lines and comments consume no ordinal.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from urlfilter.core.logging import get_logger
from urlfilter.exceptions import RuleSourceError, RuleSyntaxError
from urlfilter.rules.models import Rule

COMMENT_CHAR = "#"
SCOPE_OPEN_CHAR = ">"
SCOPE_CLOSE_CHAR = "<"
SIGNS = {"+": True, "-": False}

_LABEL = r"[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"

# "example.org:" right after the sign. At least one dot is required so that
# patterns such as "^https://" are never read as a scope.
_SCOPE_PREFIX_RE = re.compile(rf"^((?:{_LABEL}\.)+{_LABEL}):", re.IGNORECASE)

# Block directives also accept single-label hosts such as "localhost".
_SCOPE_HOST_RE = re.compile(rf"^(?:{_LABEL}\.)*{_LABEL}$", re.IGNORECASE)


def split_scope(body: str) -> tuple[Optional[str], str]:
    """Split an optional ``host:`` scope prefix off a rule body.

    Args:
        body: Rule text after the sign character

    Returns:
        (scope, pattern) tuple, scope is lowercase or None
    """
    m = _SCOPE_PREFIX_RE.match(body)
    if m is None:
        return None, body
    return m.group(1).lower(), body[m.end():]


class RuleLoader:
    """Turns rule text into an ordered list of rules.

    The loader never compiles patterns; that is the job of a matcher
    factory, which reports back-end specific pattern errors.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or get_logger(__name__)

    def parse(self, lines: Iterable[str]) -> List[Rule]:
        """Parse rule lines in order.

        Args:
            lines: Any iterable of text lines (list, file object, stream)

        Returns:
            Rules in declaration order

        Raises:
            RuleSyntaxError: A line has no sign or a bad scope directive
        """
        rules: List[Rule] = []
        block_scope: Optional[str] = None

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith(COMMENT_CHAR):
                continue

            first = line[0]
            if first == SCOPE_OPEN_CHAR:
                host = line[1:].strip().lower()
                if not _SCOPE_HOST_RE.match(host):
                    raise RuleSyntaxError(
                        line_number, raw.rstrip("\r\n"), "invalid scope host"
                    )
                block_scope = host
                continue
            if first == SCOPE_CLOSE_CHAR:
                if line[1:].strip():
                    raise RuleSyntaxError(
                        line_number, raw.rstrip("\r\n"), "unexpected text after '<'"
                    )
                block_scope = None
                continue
            if first not in SIGNS:
                raise RuleSyntaxError(line_number, raw.rstrip("\r\n"))

            scope, pattern = split_scope(line[1:])
            rules.append(
                Rule(
                    sign=SIGNS[first],
                    pattern=pattern,
                    scope=scope if scope is not None else block_scope,
                    ordinal=len(rules),
                    line_number=line_number,
                )
            )

        self.logger.debug("Parsed %d rules", len(rules), extra={"rule_count": len(rules)})
        return rules

    def read_source(
        self,
        text: Optional[str] = None,
        path: Optional[str | Path] = None,
    ) -> str:
        """Resolve the rule source to text.

        Inline text takes precedence over the file. Neither given means an
        empty rule source.

        Raises:
            RuleSourceError: The rule file cannot be read
        """
        if text is not None:
            self.logger.info("Reading URL filter rules from inline text")
            return text
        if path is None:
            self.logger.info("No URL filter rules configured")
            return ""
        self.logger.info("Reading URL filter rules file: %s", path)
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RuleSourceError(str(path), str(e)) from e

    def load(
        self,
        text: Optional[str] = None,
        path: Optional[str | Path] = None,
    ) -> List[Rule]:
        """Read and parse rules from inline text or a file."""
        return self.parse(self.read_source(text=text, path=path).splitlines())


def parse_rules(lines: Iterable[str] | str) -> List[Rule]:
    """Convenience function to parse rules with a default loader.

    Args:
        lines: Rule text or an iterable of lines

    Returns:
        Rules in declaration order
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    return RuleLoader().parse(lines)


def load_rules(
    text: Optional[str] = None,
    path: Optional[str | Path] = None,
) -> List[Rule]:
    """Convenience function to load rules from inline text or a file."""
    return RuleLoader().load(text=text, path=path)
