from __future__ import annotations

import itertools
import re
from typing import Iterator, Optional

# Opening fence at a line start, same fence string alone on the closing line.
_FENCED_CODE_RE = re.compile(
    r"^(```|~~~)([^\n]*)\n(?:[\s\S]*?\n)??\1[ \t]*$",
    re.MULTILINE,
)
_INLINE_CODE_RE = re.compile(r"`[^`]+`")

CODE_TOKEN_RE = re.compile(r"__(?:FENCED|INLINE)_CODE_\d+__")


def _token(kind: str, counter: Iterator[int]) -> str:
    return f"__{kind}_{next(counter)}__"


def mask_code_segments(src: str, counter: Optional[Iterator[int]] = None) -> tuple[str, dict[str, str]]:
    """
    Replace fenced code blocks and inline code spans with opaque tokens.

    Fenced blocks are handled first so backticks inside a fence never start an
    inline span. Unterminated fences/spans stay as ordinary text.
    """
    if counter is None:
        counter = itertools.count()
    masks: dict[str, str] = {}

    def _fenced_repl(m: re.Match) -> str:
        key = _token("FENCED_CODE", counter)
        masks[key] = m.group(0)
        return key

    def _inline_repl(m: re.Match) -> str:
        key = _token("INLINE_CODE", counter)
        masks[key] = m.group(0)
        return key

    s = _FENCED_CODE_RE.sub(_fenced_repl, src or "")
    s = _INLINE_CODE_RE.sub(_inline_repl, s)
    return s, masks


def unmask_code_segments(src: str, masks: dict[str, str]) -> str:
    s = src
    # Newest first: an inline span may have swallowed an earlier fence token.
    for key in reversed(list(masks)):
        s = s.replace(key, masks[key])
    return s
