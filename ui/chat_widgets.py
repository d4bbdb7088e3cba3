from __future__ import annotations

import html
import re

import streamlit as st

from chatmd.models import Conversation
from chatmd.render import preprocess_markdown, render_html_document, render_markdown
from ui.strings import S


def _render_app_title() -> None:
    title = str(S.get("title") or "").strip()
    if not title:
        return
    st.markdown(f"<h1 class='chat-hero-title'>{html.escape(title)}</h1>", unsafe_allow_html=True)


def _render_markdown_body(content: str, *, disable_math: bool = False) -> None:
    """
    Show assistant markdown.

    Math on: Streamlit's own markdown (KaTeX) gets the preprocessed text.
    Math off: render to HTML ourselves so `$` stays literal.
    """
    if not (content or "").strip():
        return
    if disable_math:
        st.markdown(render_markdown(content, disable_math=True), unsafe_allow_html=True)
    else:
        st.markdown(preprocess_markdown(content))


def _md_to_plain_text(md: str) -> str:
    """
    Best-effort Markdown -> plain text for clipboard copy.
    Keeps formulas as their LaTeX source ($$...$$ / $...$).
    """
    if not md:
        return ""

    s = md
    # Remove code fences but keep their content.
    s = re.sub(r"```[^\n]*\n", "", s)
    s = s.replace("```", "")
    s = re.sub(r"`([^`]+)`", r"\1", s)
    # Images before links: ![alt](url) -> alt
    s = re.sub(r"!\[([^\]]*)\]\([^)]+\)", r"\1", s)
    s = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", s)
    s = s.replace("**", "").replace("__", "").replace("~~", "")
    s = re.sub(r"(?m)^\s{0,3}#{1,6}\s+", "", s)
    s = re.sub(r"(?m)^\s*[-*+]\s+", "", s)
    s = re.sub(r"(?m)^\s*\d+\.\s+", "", s)
    s = re.sub(r"\n{3,}", "\n\n", s).strip()
    return s


def _render_answer_tools(answer_md: str, *, key_ns: str, title: str, disable_math: bool = False) -> None:
    with st.expander(S["source"], expanded=False):
        # st.code ships its own copy button.
        st.code(answer_md or "", language="markdown")
        st.code(_md_to_plain_text(answer_md or ""), language="text")
    st.download_button(
        S["download_html"],
        data=render_html_document(answer_md or "", title=title, disable_math=disable_math),
        file_name=f"{key_ns}.html",
        mime="text/html",
        key=f"{key_ns}_html",
    )


def _render_user_message(content: str) -> None:
    safe = html.escape(content or "").replace("\n", "<br/>")
    st.markdown(f"<div class='msg-user'>{safe}</div>", unsafe_allow_html=True)


def _render_ai_live_header() -> None:
    st.markdown(
        f"<div class='chat-livebar'><span class='chat-live-pill'>{html.escape(S['generating'])}</span></div>",
        unsafe_allow_html=True,
    )


def _conversation_label(conv: Conversation, *, max_len: int = 40) -> str:
    title = (conv.title or "").strip() or "New Chat"
    if len(title) > max_len:
        title = title[: max_len - 3] + "..."
    return title
