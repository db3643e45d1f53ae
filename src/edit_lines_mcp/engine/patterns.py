"""Match-condition helpers: regex compilation, span search, replacement templates.

Every search is a plain function of (pattern, text) that returns a fresh
result; nothing keeps a search cursor between calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .exceptions import InvalidPatternError

# (?<name>...) -> (?P<name>...), leaving lookbehinds (?<= and (?<! alone
_JS_NAMED_GROUP_RE = re.compile(r"(?<!\\)\(\?<(?![=!])")

_TEMPLATE_TOKEN_RE = re.compile(r"\$(?:\{(\w+)\}|<(\w+)>|(\d{1,2})|(&)|(\$))")


@dataclass(frozen=True)
class MatchSpan:
    """Half-open interval [start, end) of a match plus its replacement."""

    start: int
    end: int
    replacement: str

    def overlaps(self, other: MatchSpan) -> bool:
        return self.start < other.end and other.start < self.end


def compile_pattern(pattern: str, line_number: int | None = None) -> re.Pattern[str]:
    """Compile a match-condition regex.

    Raises:
        InvalidPatternError: If the pattern does not compile
    """
    translated = _JS_NAMED_GROUP_RE.sub("(?P<", pattern)
    try:
        return re.compile(translated)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e), line_number) from e


def expand_template(template: str, match: re.Match[str]) -> str:
    """Interpolate capture groups into a replacement string.

    Supported references: ``${name}``, ``$<name>``, ``$1``..``$99``,
    ``$&`` (whole match) and ``$$`` (literal dollar). References to
    groups that do not exist are left as written; groups that did not
    participate in the match expand to "".
    """
    named = match.re.groupindex

    def substitute(token: re.Match[str]) -> str:
        name = token.group(1) or token.group(2)
        if name is not None:
            if name in named:
                return match.group(name) or ""
            if name.isdigit() and int(name) <= match.re.groups:
                return match.group(int(name)) or ""
            return token.group(0)
        if token.group(3) is not None:
            index = int(token.group(3))
            if 0 < index <= match.re.groups:
                return match.group(index) or ""
            return token.group(0)
        if token.group(4) is not None:
            return match.group(0)
        return "$"

    return _TEMPLATE_TOKEN_RE.sub(substitute, template)


def find_regex(text: str, pattern: str, replacement: str = "") -> MatchSpan | None:
    """First regex match in ``text`` with ``replacement`` expanded against it."""
    match = compile_pattern(pattern).search(text)
    if match is None:
        return None
    return MatchSpan(match.start(), match.end(), expand_template(replacement, match))


def find_exact(text: str, needle: str, replacement: str = "") -> MatchSpan | None:
    """First literal occurrence of ``needle`` in ``text``.

    Falls back to matching with every whitespace run in ``needle`` allowed
    to match any whitespace run in ``text`` (so ``a   =   b`` finds
    ``a = b``). The span always refers to the original ``text``.
    """
    start = text.find(needle)
    if start >= 0:
        return MatchSpan(start, start + len(needle), replacement)

    words = needle.split()
    if not words:
        return None
    flexible = re.compile(r"\s+".join(re.escape(word) for word in words))
    match = flexible.search(text)
    if match is None:
        return None
    return MatchSpan(match.start(), match.end(), replacement)


__all__ = ["MatchSpan", "compile_pattern", "expand_template", "find_exact", "find_regex"]
