"""Tests for rule text parsing."""

import io
import logging

import pytest

from urlfilter.exceptions import RuleSourceError, RuleSyntaxError
from urlfilter.rules import MatchDecision, Rule, RuleLoader, parse_rules, split_scope


class TestRuleGrammar:
    """Test suite for the line grammar."""

    def test_signs_and_order(self):
        """Test rules keep declaration order and sign polarity."""
        rules = parse_rules("+foo\n-bar\n+baz")
        assert [r.pattern for r in rules] == ["foo", "bar", "baz"]
        assert [r.sign for r in rules] == [True, False, True]
        assert [r.ordinal for r in rules] == [0, 1, 2]

    def test_comments_and_blank_lines_skipped(self):
        """Test comments and blank lines take no ordinal."""
        rules = parse_rules("# header\n\n+foo\n   \n# another\n-bar\n")
        assert len(rules) == 2
        assert rules[0].ordinal == 0
        assert rules[0].line_number == 3
        assert rules[1].ordinal == 1
        assert rules[1].line_number == 6

    def test_surrounding_whitespace_ignored(self):
        """Test leading and trailing whitespace around a rule."""
        rules = parse_rules("   -/errdap/wms/  \t")
        assert rules[0].pattern == "/errdap/wms/"
        assert rules[0].sign is False

    def test_indented_comment(self):
        """Test a comment indented with spaces is still a comment."""
        assert parse_rules("    # not a rule") == []

    def test_empty_pattern_allowed(self):
        """Test a bare sign is a rule with an empty pattern."""
        rules = parse_rules("-")
        assert rules == [Rule(sign=False, pattern="", ordinal=0, line_number=1)]

    def test_missing_sign_raises(self):
        """Test a rule line without sign reports line number and text."""
        with pytest.raises(RuleSyntaxError) as exc_info:
            parse_rules("+ok\nwiki\n")
        assert exc_info.value.line_number == 2
        assert exc_info.value.line == "wiki"
        assert "line 2" in str(exc_info.value)

    def test_double_sign_is_part_of_pattern(self):
        """Test only the first character is the sign."""
        rules = parse_rules("--x")
        assert rules[0].sign is False
        assert rules[0].pattern == "-x"

    def test_accepts_text_stream(self):
        """Test any iterable of lines, such as a file object."""
        rules = RuleLoader().parse(io.StringIO("+a\n-b\n"))
        assert [r.pattern for r in rules] == ["a", "b"]

    def test_rule_decision(self):
        """Test rule sign maps onto a match decision."""
        allow, deny = parse_rules("+a\n-b")
        assert allow.decision == MatchDecision.ALLOWED
        assert deny.decision == MatchDecision.DENIED


class TestScopePrefix:
    """Test suite for host-scoped rules."""

    def test_scope_only(self):
        """Test a scope with an empty pattern."""
        rules = parse_rules("+example.org:")
        assert rules[0].scope == "example.org"
        assert rules[0].pattern == ""

    def test_scope_with_pattern_lowercased(self):
        """Test the scope is lowercased and the pattern kept verbatim."""
        rules = parse_rules("-News.Example.com:/Archive/")
        assert rules[0].scope == "news.example.com"
        assert rules[0].pattern == "/Archive/"

    @pytest.mark.parametrize(
        "line",
        [
            "+^https://example\\.org/",
            "+\\.example\\.org:",
            "+https://example.org/",
            "-localhost:8080",
        ],
    )
    def test_patterns_not_read_as_scope(self, line):
        """Test text that is not a dotted host stays in the pattern."""
        rules = parse_rules(line)
        assert rules[0].scope is None
        assert rules[0].pattern == line[1:]

    def test_split_scope(self):
        """Test split_scope helper directly."""
        assert split_scope("example.org:/x") == ("example.org", "/x")
        assert split_scope("/x") == (None, "/x")

    def test_str_round_trip(self):
        """Test rule string form mirrors the rule file syntax."""
        rule = parse_rules("+example.org:/x")[0]
        assert str(rule) == "+example.org:/x"

    def test_applies_to_host_and_subdomains(self):
        """Test scope covers the host and its subdomains only."""
        rule = parse_rules("+example.org:")[0]
        assert rule.applies_to("example.org")
        assert rule.applies_to("www.example.org")
        assert not rule.applies_to("notexample.org")
        assert not rule.applies_to("example.org.evil.net")
        assert not rule.applies_to("")


class TestScopeBlocks:
    """Test suite for '>' and '<' scope directives."""

    def test_block_scope_applies_until_closed(self):
        """Test rules inside a block inherit its scope."""
        rules = parse_rules(">example.org\n-/private/\n+other.net:/x\n<\n-/tmp/\n")
        assert [r.scope for r in rules] == ["example.org", "other.net", None]
        assert [r.ordinal for r in rules] == [0, 1, 2]
        assert [r.line_number for r in rules] == [2, 3, 5]

    def test_block_scope_replaced_by_next_block(self):
        """Test a second '>' switches scope."""
        rules = parse_rules(">a.org\n-x\n>localhost\n-y")
        assert [r.scope for r in rules] == ["a.org", "localhost"]

    @pytest.mark.parametrize("line", [">", "> ", ">not a host", "< junk"])
    def test_bad_directive_raises(self, line):
        """Test malformed directives are syntax errors."""
        with pytest.raises(RuleSyntaxError) as exc_info:
            parse_rules(f"+a\n{line}\n")
        assert exc_info.value.line_number == 2


class TestRuleSource:
    """Test suite for rule source resolution."""

    def test_inline_text_wins_over_file(self, tmp_path):
        """Test inline rules take precedence over a rule file."""
        path = tmp_path / "rules.txt"
        path.write_text("-from-file\n", encoding="utf-8")
        rules = RuleLoader().load(text="+inline", path=path)
        assert [r.pattern for r in rules] == ["inline"]

    def test_file_source(self, tmp_path):
        """Test loading rules from a file."""
        path = tmp_path / "rules.txt"
        path.write_text("# rules\n-\\.rss$\n+example.org:\n", encoding="utf-8")
        rules = RuleLoader().load(path=str(path))
        assert [r.pattern for r in rules] == ["\\.rss$", ""]
        assert rules[1].scope == "example.org"

    def test_no_source_is_empty(self):
        """Test absence of any rule source yields no rules."""
        assert RuleLoader().load() == []

    def test_empty_inline_text(self):
        """Test an empty inline string is an empty rule source."""
        assert RuleLoader().load(text="", path="/does/not/matter") == []

    def test_unreadable_file_raises(self, tmp_path):
        """Test a missing rule file is a construction error."""
        missing = tmp_path / "missing.txt"
        with pytest.raises(RuleSourceError) as exc_info:
            RuleLoader().load(path=missing)
        assert exc_info.value.path == str(missing)

    def test_injected_logger(self, caplog):
        """Test the loader logs through the logger it was given."""
        logger = logging.getLogger("tests.loader.injected")
        caplog.set_level(logging.DEBUG, logger=logger.name)
        RuleLoader(logger=logger).load(text="+a\n-b")
        records = [r for r in caplog.records if r.name == logger.name]
        assert any(getattr(r, "rule_count", None) == 2 for r in records)
