from .render import contains_math_notation, preprocess_markdown, render_markdown

__all__ = ["contains_math_notation", "preprocess_markdown", "render_markdown"]
