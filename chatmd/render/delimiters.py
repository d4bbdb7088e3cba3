from __future__ import annotations

import re

_DISPLAY_BRACKET_RE = re.compile(r"\\\[([\s\S]*?)\\\]")
_INLINE_PAREN_RE = re.compile(r"\\\(([\s\S]*?)\\\)")

# A single-line $...$ pair; neither dollar escaped nor part of a $$ pair.
_DOLLAR_PAIR_RE = re.compile(r"(?<![\\$])\$(?!\$)([^$\n]+?)(?<![\\$])\$(?!\$)")

_CURRENCY_LIKE_RE = re.compile(r"\d+(?:,\d{3})*(?:\.\d{2})?")
_BACKSLASH_RE = re.compile(r"\\")
_OPERATOR_RE = re.compile(r"[+\-*/=<>^_{}()]")
_LETTERS_AND_DIGITS_RE = re.compile(r"[a-zA-Z].*\d|\d.*[a-zA-Z]")
_GREEK_RE = re.compile(r"\\(?:alpha|beta|gamma|delta|epsilon|theta|lambda|mu|pi|sigma|omega)")
_FUNCTION_RE = re.compile(r"\\(?:frac|sqrt|sum|int|lim|log|ln|sin|cos|tan|exp)")


def normalize_latex_delimiters(md: str) -> str:
    """
    \\[...\\] -> $$...$$ on its own line, \\(...\\) -> $...$.
    """
    if not md:
        return md

    def _display_repl(m: re.Match) -> str:
        inner = str(m.group(1) or "").strip()
        return f"\n$${inner}$$\n"

    def _inline_repl(m: re.Match) -> str:
        inner = str(m.group(1) or "").strip()
        return f"${inner}$"

    s = _DISPLAY_BRACKET_RE.sub(_display_repl, md)
    s = _INLINE_PAREN_RE.sub(_inline_repl, s)
    return s


def _is_probably_math(inner: str) -> bool:
    if _CURRENCY_LIKE_RE.fullmatch(inner.strip()):
        return False
    if (
        _BACKSLASH_RE.search(inner)
        or _OPERATOR_RE.search(inner)
        or _LETTERS_AND_DIGITS_RE.search(inner)
        or _GREEK_RE.search(inner)
        or _FUNCTION_RE.search(inner)
    ):
        return True
    # Anything longer than one character is treated as a variable/expression.
    return len(inner) > 1


def escape_prose_dollars(md: str) -> str:
    """
    Escape $...$ pairs that are not math so the renderer shows literal dollars.

    Deliberately biased towards math: only currency-shaped numbers and lone
    plain characters get escaped.
    """
    if not md or "$" not in md:
        return md

    def _repl(m: re.Match) -> str:
        inner = m.group(1)
        if _is_probably_math(inner):
            return m.group(0)
        return f"\\${inner}\\$"

    return _DOLLAR_PAIR_RE.sub(_repl, md)
