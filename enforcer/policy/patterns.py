"""
Pattern Matcher — shell-style wildcard matching for namespace filters.

Supported syntax:
  *        any run of characters (including none)
  ?        exactly one character
  [abc]    one character from the set; ranges (a-z) and negation ([^a] / [!a])
  \\x       the literal character x

Matching is case-sensitive and anchored to the whole value. A malformed
pattern matches nothing; callers never see a syntax error.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Pattern


class PatternError(ValueError):
    """Raised internally for malformed glob patterns."""


def matches(pattern: str, value: str) -> bool:
    if pattern == "*":
        return True
    compiled = _compile(pattern)
    if compiled is None:
        return False
    return compiled.fullmatch(value) is not None


def is_valid(pattern: str) -> bool:
    return _compile(pattern) is not None


@lru_cache(maxsize=512)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    try:
        return re.compile(translate(pattern), re.DOTALL)
    except (PatternError, re.error):
        return None


def translate(pattern: str) -> str:
    """Translate a glob into an (unanchored) regular expression source."""
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            # collapse runs of stars
            while i < n and pattern[i] == "*":
                i += 1
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "\\":
            if i >= n:
                raise PatternError("trailing backslash")
            out.append(re.escape(pattern[i]))
            i += 1
        elif c == "[":
            cls, i = _translate_class(pattern, i)
            out.append(cls)
        else:
            out.append(re.escape(c))
    return "".join(out)


def _translate_class(pattern: str, i: int):
    """Parse a character class starting just after '['; return (regex, next index)."""
    n = len(pattern)
    negate = False
    if i < n and pattern[i] in "^!":
        negate = True
        i += 1

    items = []
    while True:
        if i >= n:
            raise PatternError("unterminated character class")
        c = pattern[i]
        if c == "]":
            i += 1
            break
        lo, i = _class_char(pattern, i)
        if i + 1 < n and pattern[i] == "-" and pattern[i + 1] != "]":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise PatternError(f"bad range {lo}-{hi}")
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            items.append(re.escape(lo))

    if not items:
        raise PatternError("empty character class")
    return ("[^" if negate else "[") + "".join(items) + "]", i


def _class_char(pattern: str, i: int):
    c = pattern[i]
    if c == "\\":
        if i + 1 >= len(pattern):
            raise PatternError("trailing backslash")
        return pattern[i + 1], i + 2
    return c, i + 1
