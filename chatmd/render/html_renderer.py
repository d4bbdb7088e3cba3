"""Markdown -> HTML using markdown-it-py.

Parser setup:
- CommonMark base
- GFM tables and strikethrough
- Dollar math ($inline$ and $$display$$), unless math is disabled
- Links always open in a new browsing context
"""

from __future__ import annotations

import html
import json

from markdown_it import MarkdownIt
from mdit_py_plugins.dollarmath import dollarmath_plugin

from .pipeline import preprocess_markdown

KATEX_MACROS: dict[str, str] = {
    "\\RR": "\\mathbb{R}",
    "\\NN": "\\mathbb{N}",
    "\\ZZ": "\\mathbb{Z}",
    "\\QQ": "\\mathbb{Q}",
    "\\CC": "\\mathbb{C}",
    "\\dx": "\\,dx",
    "\\dy": "\\,dy",
    "\\dt": "\\,dt",
    "\\dz": "\\,dz",
}

_KATEX_VERSION = "0.16.11"
_KATEX_CDN = f"https://cdn.jsdelivr.net/npm/katex@{_KATEX_VERSION}/dist"


def _render_math(content: str, options: dict) -> str:
    # Raw TeX for client-side KaTeX; only HTML-unsafe chars are escaped.
    body = html.escape(content)
    if options.get("display_mode"):
        return f"\\[{body}\\]"
    return f"\\({body}\\)"


def _render_link_open(self, tokens, idx, options, env):
    token = tokens[idx]
    token.attrSet("target", "_blank")
    token.attrSet("rel", "noopener noreferrer")
    return self.renderToken(tokens, idx, options, env)


def create_parser(*, disable_math: bool = False) -> MarkdownIt:
    # Model output is untrusted; raw HTML is rendered as text.
    md = MarkdownIt("commonmark", {"html": False}).enable("table").enable("strikethrough")
    if not disable_math:
        md.use(dollarmath_plugin, renderer=_render_math)
    md.add_render_rule("link_open", _render_link_open)
    return md


_parsers: dict[bool, MarkdownIt] = {}


def get_parser(*, disable_math: bool = False) -> MarkdownIt:
    parser = _parsers.get(disable_math)
    if parser is None:
        parser = create_parser(disable_math=disable_math)
        _parsers[disable_math] = parser
    return parser


def render_markdown(content: str, *, disable_math: bool = False) -> str:
    processed = preprocess_markdown(content)
    if not processed:
        return ""
    return get_parser(disable_math=disable_math).render(processed)


def render_html_document(content: str, *, title: str = "Conversation", disable_math: bool = False) -> str:
    """Standalone page; KaTeX (with mhchem) renders the math in the browser."""
    body = render_markdown(content, disable_math=disable_math)
    head_math = ""
    if not disable_math:
        katex_options = {
            "delimiters": [
                {"left": "\\[", "right": "\\]", "display": True},
                {"left": "\\(", "right": "\\)", "display": False},
            ],
            "throwOnError": False,
            "errorColor": "#cc0000",
            "strict": False,
            "trust": False,
            "macros": KATEX_MACROS,
        }
        head_math = (
            f'<link rel="stylesheet" href="{_KATEX_CDN}/katex.min.css">\n'
            f'<script defer src="{_KATEX_CDN}/katex.min.js"></script>\n'
            f'<script defer src="{_KATEX_CDN}/contrib/mhchem.min.js"></script>\n'
            f'<script defer src="{_KATEX_CDN}/contrib/auto-render.min.js"\n'
            f"  onload='renderMathInElement(document.body, {html.escape(json.dumps(katex_options), quote=True)});'></script>\n"
        )
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(title)}</title>\n"
        f"{head_math}"
        "</head>\n"
        f'<body>\n<div class="markdown-content">\n{body}</div>\n</body>\n</html>\n'
    )
