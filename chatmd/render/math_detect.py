from __future__ import annotations

import re

from .masking import CODE_TOKEN_RE

# Already-delimited math; nothing inside these is rescanned.
# A `$` followed by a digit opens a price, not math.
_MATH_REGION_RE = re.compile(
    r"\$\$[\s\S]+?\$\$"
    r"|\\\[[\s\S]+?\\\]"
    r"|\\\([\s\S]+?\\\)"
    r"|(?<![\\$])\$(?![\d$])[^$\n]+?(?<!\\)\$"
)

# x^2 + y^2 = z^2, a_1 = 3
_EQUATION_RE = re.compile(
    r"(?<!\S)"
    r"([a-zA-Z0-9]+\s*[\^_]\s*[a-zA-Z0-9{}]+"
    r"(?:\s*[+\-*/]\s*[a-zA-Z0-9]+\s*[\^_]\s*[a-zA-Z0-9{}]+)*"
    r"\s*=\s*[^$\n]+)"
    r"(?=\s|$)"
)
_FRACTION_RE = re.compile(r"(?<!\S)(\\frac\{[^}]+\}\{[^}]+\})(?=\s|$)")
_FUNCTION_RE = re.compile(
    r"(?<!\S)(\\(?:sqrt|int|sum|prod|lim|log|ln|sin|cos|tan|exp)(?![A-Za-z])[^$\n]{0,50})(?=\s|$)"
)
# H2O, NaCl, Ca(OH)2, Fe3+
_CHEMICAL_RE = re.compile(
    r"(?<!\S)"
    r"((?:[A-Z][a-z]?\d*(?:\((?:[A-Z][a-z]?\d*)+\)\d*)?)+(?:[+-]\d*)?)"
    r"(?=\s|$)"
)

_DETECTORS = (_EQUATION_RE, _FRACTION_RE, _FUNCTION_RE, _CHEMICAL_RE)

_MATH_HINT_RE = re.compile(r"[\\^_+=<>]|\b(?:frac|sqrt|sum|int|lim|log|ln|sin|cos|tan|exp)\b")
_SINGLE_LETTER_RE = re.compile(r"[A-Za-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_LOWER_RE = re.compile(r"[a-z]")


def _looks_like_math(expr: str) -> bool:
    return bool(_MATH_HINT_RE.search(expr))


def _looks_like_chemistry(expr: str) -> bool:
    if re.search(r"\d", expr) or re.search(r"[()]", expr):
        return True
    return len(_UPPER_RE.findall(expr)) >= 2 and len(_LOWER_RE.findall(expr)) > 0


def _should_wrap(expr: str) -> bool:
    if "$" in expr or "`" in expr:
        return False
    if CODE_TOKEN_RE.search(expr):
        return False
    trimmed = expr.strip()
    if not trimmed or _SINGLE_LETTER_RE.fullmatch(trimmed):
        return False
    return _looks_like_math(trimmed) or _looks_like_chemistry(trimmed)


def _wrap_matches(md: str, pattern: re.Pattern) -> str:
    protected = [m.span() for m in _MATH_REGION_RE.finditer(md)]

    def _repl(m: re.Match) -> str:
        expr = m.group(1)
        start, end = m.span(1)
        if any(a < end and start < b for a, b in protected):
            return m.group(0)
        if not _should_wrap(expr):
            return m.group(0)
        core = expr.strip()
        lead = expr[: len(expr) - len(expr.lstrip())]
        trail = expr[len(expr.rstrip()):]
        return f"{lead}${core}${trail}"

    return pattern.sub(_repl, md)


def wrap_bare_math(md: str) -> str:
    """
    Wrap undelimited math/chemistry in $...$.

    Heuristic by nature: it misses some math and wraps a few prose tokens
    that happen to look like formulas (e.g. "NaN", "PhD").
    """
    if not md:
        return md
    for pattern in _DETECTORS:
        md = _wrap_matches(md, pattern)
    return md
