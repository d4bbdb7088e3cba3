from __future__ import annotations

import itertools
import logging
import re

from .currency import extract_currency, restore_currency
from .delimiters import escape_prose_dollars, normalize_latex_delimiters
from .masking import mask_code_segments, unmask_code_segments
from .math_detect import wrap_bare_math

logger = logging.getLogger(__name__)

_PLAIN_AMOUNT_RE = re.compile(r"\$\s?\d+(?:,\d{3})*(?:\.\d+)?\b")
_MATH_NOTATION_PATTERNS = (
    re.compile(r"\$\$[\s\S]+?\$\$"),
    re.compile(r"(?<!\\)\$[^$\n]+?(?<!\\)\$"),
    re.compile(r"\\\[[\s\S]+?\\\]"),
    re.compile(r"\\\([^)]+?\\\)"),
)


def preprocess_markdown(content: str) -> str:
    """
    Turn raw model output into markdown that a `$`-math renderer can take
    as is: math delimited, currency and prose dollars escaped, code untouched.

    Steps (order matters):
    - mask fenced/inline code
    - wrap bare math/chemistry in $...$
    - swap currency for placeholders (ranges, then single amounts)
    - \\[..\\] / \\(..\\) -> $$..$$ / $..$
    - escape $...$ pairs that are not math
    - restore currency with escaped dollars, then unmask code

    Never raises: on any internal failure the input comes back unchanged.
    """
    if not content or not isinstance(content, str):
        return ""

    try:
        # Tokens from every step share one counter, scoped to this call.
        counter = itertools.count()

        s = content.replace("\r\n", "\n").replace("\r", "\n")
        s, masks = mask_code_segments(s, counter)
        s = wrap_bare_math(s)
        s, currency = extract_currency(s, counter)
        s = normalize_latex_delimiters(s)
        s = escape_prose_dollars(s)
        s = restore_currency(s, currency)
        s = unmask_code_segments(s, masks)

        return s.rstrip() + "\n"
    except Exception as e:  # noqa: BLE001
        logger.warning("Error preprocessing markdown: %s", e)
        return content


def contains_math_notation(text: str) -> bool:
    """True when the text carries delimited math once plain dollar amounts are ignored."""
    if not text:
        return False
    without_currency = _PLAIN_AMOUNT_RE.sub("", text)
    return any(p.search(without_currency) for p in _MATH_NOTATION_PATTERNS)
