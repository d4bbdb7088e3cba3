from __future__ import annotations

import itertools
import re
from typing import Iterator, Optional

# $5, $1,299.99, ($12.50), $(3), -$3.25, $-3, $1.2k, $3 million
_CURRENCY_CORE = (
    r"-?(?:\$\(?|\(\$)-?"
    r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?"
    r"\)?"
    r"(?i:\s?(?:kilo|million|billion|[kmb])(?![a-z]))?"
)

_RANGE_RE = re.compile(rf"({_CURRENCY_CORE})(\s?[\u2013-]\s?)({_CURRENCY_CORE})")
_SINGLE_RE = re.compile(_CURRENCY_CORE)
_CURRENCY_TOKEN_RE = re.compile(r"__CURRENCY_\d+__")


def extract_currency(md: str, counter: Optional[Iterator[int]] = None) -> tuple[str, dict[str, str]]:
    """
    Swap monetary amounts for placeholders so later `$` handling cannot pair
    them up as math delimiters. Ranges go first, one token per side, so the
    dash between them is never read as a minus sign.
    """
    if counter is None:
        counter = itertools.count()
    currency: dict[str, str] = {}

    def _placeholder(original: str) -> str:
        key = f"__CURRENCY_{next(counter)}__"
        currency[key] = original
        return key

    def _range_repl(m: re.Match) -> str:
        left = _placeholder(m.group(1))
        right = _placeholder(m.group(3))
        return f"{left}{m.group(2)}{right}"

    s = _RANGE_RE.sub(_range_repl, md or "")
    s = _SINGLE_RE.sub(lambda m: _placeholder(m.group(0)), s)
    return s, currency


def restore_currency(md: str, currency: dict[str, str]) -> str:
    """Put amounts back with every `$` escaped for the math renderer."""
    if not currency:
        return md

    def _repl(m: re.Match) -> str:
        key = m.group(0)
        original = currency.get(key)
        if original is None:
            return key
        return original.replace("$", "\\$")

    return _CURRENCY_TOKEN_RE.sub(_repl, md)
