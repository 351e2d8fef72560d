"""High-throughput matcher for literal rules.

Supports a restricted pattern language written in regex syntax:

    literal        URL contains literal
    ^literal       URL starts with literal
    literal$       URL ends with literal
    ^literal$      URL equals literal
    (?i)...        any of the above, ignoring case

Case-insensitive rules fold the URL and the literal with the character
classes of ``re.IGNORECASE``, not ``str.lower``.

Metacharacters are written literally by escaping them (``\\.rss$``), so every
rule file the fast matcher accepts is also a valid regex rule file with the
same decisions.

Instead of scanning every rule against the URL, rules are grouped by anchor
class into shared structures: a trie for prefix and exact rules, a trie of
reversed literals for suffix rules and an Aho-Corasick automaton for
substring rules. Each URL walks every structure once; among all hits the
lowest ordinal wins, exactly as in an ordered scan.
"""

from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import ahocorasick

from urlfilter.exceptions import UnsupportedPatternError
from urlfilter.matchers.base import Matcher, MatcherFactory
from urlfilter.rules.models import Rule

IGNORE_CASE_MARKER = "(?i)"
METACHARACTERS = frozenset(".^$*+?{}[]()|\\")
FOLD_CACHE_SIZE = 4096


class CaseFolder:
    """Folds text so that equal folds mean equal under ``re.IGNORECASE``.

    Every character maps to one representative of its case-insensitive
    class. Classes are looked up by asking ``re`` itself, so pairs that
    ``str.lower`` keeps apart (i/ı, s/ſ, k and the Kelvin sign) fold
    together exactly when the regex back-end treats them as equal.
    ASCII letters fold to their lowercase form.

    Args:
        alphabet: Characters of the literals that will be folded
    """

    def __init__(self, alphabet: Iterable[str] = ""):
        self._classes: List[Tuple[str, re.Pattern]] = []
        for ch in string.ascii_lowercase:
            self._add_class(ch)
        for ch in alphabet:
            if not ch.isascii():
                self._add_class(ch)
        # Thread-safe memo; folding results never change
        self._fold_char = lru_cache(maxsize=FOLD_CACHE_SIZE)(self._classify)

    def _add_class(self, ch: str) -> None:
        if self._find(ch) is None:
            self._classes.append((ch, re.compile(re.escape(ch), re.IGNORECASE)))

    def _find(self, ch: str) -> Optional[str]:
        for representative, pattern in self._classes:
            if pattern.fullmatch(ch):
                return representative
        return None

    def _classify(self, ch: str) -> str:
        representative = self._find(ch)
        return ch if representative is None else representative

    def fold(self, text: str) -> str:
        if text.isascii():
            return text.lower()
        return "".join(map(self._fold_char, text))


@dataclass(frozen=True)
class LiteralPattern:
    """A fast-subset pattern reduced to a literal and its anchors."""
    literal: str
    anchored_start: bool = False
    anchored_end: bool = False
    ignore_case: bool = False

    def matches(self, url: str) -> bool:
        """Match ``url`` against this single pattern."""
        literal, text = self.literal, url
        if self.ignore_case:
            folder = CaseFolder(literal)
            literal, text = folder.fold(literal), folder.fold(url)
        if self.anchored_start and self.anchored_end:
            return text == literal
        if self.anchored_start:
            return text.startswith(literal)
        if self.anchored_end:
            return text.endswith(literal)
        return literal in text


def parse_literal_pattern(pattern: str) -> LiteralPattern:
    """Reduce a pattern to a LiteralPattern.

    Raises:
        ValueError: The pattern uses regex features beyond the fast subset
    """
    text = pattern
    ignore_case = text.startswith(IGNORE_CASE_MARKER)
    if ignore_case:
        text = text[len(IGNORE_CASE_MARKER):]

    anchored_start = text.startswith("^")
    if anchored_start:
        text = text[1:]

    chars: List[str] = []
    anchored_end = False
    i = 0
    last = len(text) - 1
    while i <= last:
        c = text[i]
        if c == "\\":
            if i == last:
                raise ValueError("trailing backslash")
            escaped = text[i + 1]
            if escaped.isascii() and escaped.isalnum():
                raise ValueError(f"escape sequence \\{escaped} is not a literal")
            chars.append(escaped)
            i += 2
            continue
        if c == "$" and i == last:
            anchored_end = True
        elif c in METACHARACTERS:
            raise ValueError(f"unescaped metacharacter {c!r} at offset {i}")
        else:
            chars.append(c)
        i += 1

    return LiteralPattern(
        literal="".join(chars),
        anchored_start=anchored_start,
        anchored_end=anchored_end,
        ignore_case=ignore_case,
    )


class _TrieNode:
    __slots__ = ("children", "ordinals", "exact")

    def __init__(self):
        self.children: Dict[str, _TrieNode] = {}
        self.ordinals: List[int] = []  # rules accepting here as prefix/suffix
        self.exact: List[int] = []     # rules accepting only if the URL ends here


class _Trie:
    """Character trie walked once over the URL (or its reverse)."""

    def __init__(self):
        self.root = _TrieNode()
        self.size = 0

    def _node_for(self, key: str) -> _TrieNode:
        node = self.root
        for ch in key:
            child = node.children.get(ch)
            if child is None:
                child = node.children[ch] = _TrieNode()
            node = child
        return node

    def add(self, key: str, ordinal: int) -> None:
        self._node_for(key).ordinals.append(ordinal)
        self.size += 1

    def add_exact(self, key: str, ordinal: int) -> None:
        self._node_for(key).exact.append(ordinal)
        self.size += 1

    def collect(self, chars: Iterable[str], hits: List[int]) -> None:
        node = self.root
        hits.extend(node.ordinals)
        for ch in chars:
            node = node.children.get(ch)
            if node is None:
                return
            hits.extend(node.ordinals)
        hits.extend(node.exact)


class _LiteralIndex:
    """All match structures for rules sharing one case mode."""

    def __init__(self):
        self.prefixes = _Trie()
        self.suffixes = _Trie()
        self.everywhere: List[int] = []  # empty substring rules
        self._substrings: Dict[str, List[int]] = {}
        self.automaton: Optional[ahocorasick.Automaton] = None

    def add(self, pattern: LiteralPattern, literal: str, ordinal: int) -> None:
        if pattern.anchored_start and pattern.anchored_end:
            self.prefixes.add_exact(literal, ordinal)
        elif pattern.anchored_start:
            self.prefixes.add(literal, ordinal)
        elif pattern.anchored_end:
            self.suffixes.add(literal[::-1], ordinal)
        elif not literal:
            self.everywhere.append(ordinal)
        else:
            self._substrings.setdefault(literal, []).append(ordinal)

    def build(self) -> None:
        if not self._substrings:
            return
        automaton = ahocorasick.Automaton()
        for literal, ordinals in self._substrings.items():
            automaton.add_word(literal, tuple(ordinals))
        automaton.make_automaton()
        self.automaton = automaton

    @property
    def empty(self) -> bool:
        return not (
            self.prefixes.size or self.suffixes.size or self.everywhere or self._substrings
        )

    def collect(self, text: str, hits: List[int]) -> None:
        hits.extend(self.everywhere)
        if self.prefixes.size:
            self.prefixes.collect(text, hits)
        if self.suffixes.size:
            self.suffixes.collect(reversed(text), hits)
        if self.automaton is not None:
            for _, ordinals in self.automaton.iter(text):
                hits.extend(ordinals)


class FastMatcher(Matcher):
    """Matches all literal rules with shared tries and an Aho-Corasick automaton.

    Per-URL cost is proportional to the URL length plus the number of hits,
    not to the number of rules.
    """

    name = "fast"

    def __init__(self, rules: Sequence[Rule]):
        self._rules = tuple(rules)
        self._patterns: List[LiteralPattern] = []
        self._exact_case = _LiteralIndex()
        self._ignore_case = _LiteralIndex()

        for rule in self._rules:
            try:
                self._patterns.append(parse_literal_pattern(rule.pattern))
            except ValueError as e:
                raise UnsupportedPatternError(rule.line_number, rule.pattern, str(e)) from e

        self._folder = CaseFolder(
            "".join(p.literal for p in self._patterns if p.ignore_case)
        )
        for rule, pattern in zip(self._rules, self._patterns):
            if pattern.ignore_case:
                self._ignore_case.add(pattern, self._folder.fold(pattern.literal), rule.ordinal)
            else:
                self._exact_case.add(pattern, pattern.literal, rule.ordinal)

        self._exact_case.build()
        self._ignore_case.build()
        self._has_ignore_case = not self._ignore_case.empty

    @property
    def patterns(self) -> tuple[LiteralPattern, ...]:
        return tuple(self._patterns)

    def first_match(self, url: str, host: str = "") -> Optional[int]:
        hits: List[int] = []
        self._exact_case.collect(url, hits)
        if self._has_ignore_case:
            self._ignore_case.collect(self._folder.fold(url), hits)
        if not hits:
            return None

        best: Optional[int] = None
        rules = self._rules
        for ordinal in hits:
            if best is not None and ordinal >= best:
                continue
            if rules[ordinal].applies_to(host):
                best = ordinal
        return best


class FastMatcherFactory(MatcherFactory):
    """Factory for fast matchers."""

    name = "fast"

    def __init__(self, logger: logging.Logger | None = None):
        super().__init__(logger=logger)

    def create_matcher(self, rules: Sequence[Rule]) -> FastMatcher:
        return FastMatcher(rules)
