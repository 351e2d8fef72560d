"""Custom exceptions for the URL filter."""


class UrlFilterError(Exception):
    """Base class for URL filter exceptions.

    All custom exceptions inherit from this class so callers can catch
    every construction-time and per-URL failure with a single clause.
    """

    def __init__(self, message: str = "URL filter error"):
        self.message = message
        super().__init__(message)


class RuleSyntaxError(UrlFilterError):
    """Raised when a rule line has no recognized sign character.

    Also raised for malformed scope directives.
    """

    def __init__(self, line_number: int, line: str, detail: str | None = None):
        self.line_number = line_number
        self.line = line
        message = detail or "rule must start with '+' or '-'"
        super().__init__(f"line {line_number}: {message}: {line!r}")


class PatternCompileError(UrlFilterError):
    """Raised when a rule pattern is not a valid regular expression."""

    def __init__(self, line_number: int, pattern: str, detail: str):
        self.line_number = line_number
        self.pattern = pattern
        self.detail = detail
        super().__init__(f"line {line_number}: invalid pattern {pattern!r}: {detail}")


class UnsupportedPatternError(UrlFilterError):
    """Raised when the fast matcher is fed a pattern outside its subset.

    The fast matcher only understands literals, optionally anchored with
    ``^`` and ``$``, and a leading ``(?i)`` marker.
    """

    def __init__(self, line_number: int, pattern: str, detail: str):
        self.line_number = line_number
        self.pattern = pattern
        self.detail = detail
        super().__init__(
            f"line {line_number}: pattern {pattern!r} not supported by fast matcher: {detail}"
        )


class MalformedUrlError(UrlFilterError):
    """Raised when a URL cannot be split into host, path and query."""

    def __init__(self, url: str, detail: str = "cannot parse URL"):
        self.url = url
        self.detail = detail
        super().__init__(f"{detail}: {url!r}")


class RuleSourceError(UrlFilterError):
    """Raised when a rule file cannot be read."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"cannot read rules from {path}: {detail}")
