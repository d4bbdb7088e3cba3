from .pipeline import contains_math_notation, preprocess_markdown
from .html_renderer import KATEX_MACROS, render_html_document, render_markdown

__all__ = [
    "KATEX_MACROS",
    "contains_math_notation",
    "preprocess_markdown",
    "render_html_document",
    "render_markdown",
]
