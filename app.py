# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time

import streamlit as st

from chatmd.chat_store import ChatStore
from chatmd.config import Settings, load_settings
from chatmd.llm import ChatClient
from chatmd.render import preprocess_markdown
from ui.chat_widgets import (
    _conversation_label,
    _render_ai_live_header,
    _render_answer_tools,
    _render_app_title,
    _render_markdown_body,
    _render_user_message,
)
from ui.strings import S

logger = logging.getLogger(__name__)


def _get_chat_store() -> ChatStore:
    store = st.session_state.get("chat_store")
    if not isinstance(store, ChatStore):
        store = ChatStore()
        st.session_state["chat_store"] = store
    return store


@st.cache_resource
def _get_client(settings: Settings) -> ChatClient:
    return ChatClient(settings)


def _stream_into(placeholder, pieces, *, delay_s: float, disable_math: bool) -> None:
    acc: list[str] = []
    for piece in pieces:
        acc.append(piece)
        live = "".join(acc)
        if disable_math:
            placeholder.text(live + " ▌")
        else:
            placeholder.markdown(preprocess_markdown(live).rstrip("\n") + " ▌")
        if delay_s > 0:
            time.sleep(delay_s)


def _page_chat(
    settings: Settings,
    chat_store: ChatStore,
    *,
    temperature: float,
    max_tokens: int,
    disable_math: bool,
) -> None:
    conv = chat_store.current_conversation()
    msgs = list(conv.messages) if conv else []

    if chat_store.error:
        st.error(chat_store.error)
        if st.button(S["dismiss"], key="dismiss_error"):
            chat_store.clear_error()
            st.rerun()

    if not msgs:
        st.caption(S["no_msgs"])

    last_assistant_id = next((m.id for m in reversed(msgs) if m.role == "assistant"), None)
    for m in msgs:
        with st.chat_message(m.role):
            if m.role == "user":
                _render_user_message(m.content)
                continue
            if m.is_streaming:
                _render_ai_live_header()
            _render_markdown_body(m.content, disable_math=disable_math)
            if m.is_streaming or not m.content:
                continue
            _render_answer_tools(m.content, key_ns=m.id, title=conv.title if conv else S["title"], disable_math=disable_math)
            if m.id == last_assistant_id and st.button(S["regenerate"], key=f"regen_{m.id}"):
                st.session_state["regenerate_id"] = m.id
                st.rerun()

    client = None
    if settings.api_key:
        try:
            client = _get_client(settings)
        except Exception as e:  # noqa: BLE001
            st.error(str(e))

    stream_kwargs = {"temperature": temperature, "max_tokens": max_tokens}
    regen_id = st.session_state.pop("regenerate_id", None)
    if regen_id and client is not None:
        with st.chat_message("assistant"):
            _render_ai_live_header()
            placeholder = st.empty()
            _stream_into(
                placeholder,
                chat_store.regenerate_response(regen_id, client, **stream_kwargs),
                delay_s=settings.stream_delay_s,
                disable_math=disable_math,
            )
        st.rerun()

    prompt = st.chat_input(S["prompt"], disabled=client is None or chat_store.is_loading)
    if prompt:
        with st.chat_message("user"):
            _render_user_message(prompt)
        with st.chat_message("assistant"):
            _render_ai_live_header()
            placeholder = st.empty()
            _stream_into(
                placeholder,
                chat_store.send_message(prompt, client, **stream_kwargs),
                delay_s=settings.stream_delay_s,
                disable_math=disable_math,
            )
        st.rerun()


def _sidebar(settings: Settings, chat_store: ChatStore) -> tuple[float, int, bool]:
    with st.sidebar:
        st.subheader(S["history"])
        if st.button(S["new_chat"], key="new_chat"):
            chat_store.clear_error()
            chat_store.create_conversation()
            st.rerun()

        pending_delete = st.session_state.get("pending_delete")
        for conv in chat_store.list_conversations():
            is_current = conv.id == chat_store.current_conversation_id
            cols = st.columns([5, 1])
            with cols[0]:
                label = ("▸ " if is_current else "") + _conversation_label(conv)
                if st.button(label, key=f"conv_{conv.id}"):
                    chat_store.select_conversation(conv.id)
                    chat_store.clear_error()
                    st.rerun()
            with cols[1]:
                if st.button("✕", key=f"del_{conv.id}", help=S["del_chat"]):
                    st.session_state["pending_delete"] = conv.id
                    st.rerun()
            if pending_delete == conv.id:
                st.warning(S["confirm_delete"])
                c_ok, c_cancel = st.columns(2)
                with c_ok:
                    if st.button(S["confirm"], key=f"confirm_del_{conv.id}"):
                        chat_store.delete_conversation(conv.id)
                        st.session_state.pop("pending_delete", None)
                        st.rerun()
                with c_cancel:
                    if st.button(S["cancel"], key=f"cancel_del_{conv.id}"):
                        st.session_state.pop("pending_delete", None)
                        st.rerun()

        st.markdown("---")
        st.subheader(S["settings"])
        disable_math = st.checkbox(S["disable_math"], value=settings.disable_math, key="disable_math")
        temperature = st.slider(S["temp"], min_value=0.0, max_value=1.0, value=0.2, step=0.05)
        max_tokens = st.slider(S["max_tokens"], min_value=256, max_value=4096, value=1216, step=64)

        st.markdown("---")
        st.subheader(S["model"])
        st.caption(f"Base URL: {settings.base_url}")
        st.caption(f"Model: {settings.model}")
        st.caption(f"Timeout: {settings.timeout_s:.0f}s | Retries: {settings.max_retries}")
        if settings.api_key:
            st.caption(S["key_set"])
        else:
            st.warning(S["key_missing"])
    return temperature, max_tokens, disable_math


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    st.set_page_config(page_title=S["title"], layout="wide")
    _render_app_title()

    chat_store = _get_chat_store()
    # A rerun mid-stream leaves a half-written reply behind.
    if chat_store.is_loading:
        logger.warning("Dropping interrupted streaming reply")
        chat_store.cleanup_streaming_messages()
    if chat_store.current_conversation() is None:
        chat_store.create_conversation()

    temperature, max_tokens, disable_math = _sidebar(settings, chat_store)
    _page_chat(
        settings,
        chat_store,
        temperature=temperature,
        max_tokens=max_tokens,
        disable_math=disable_math,
    )


if __name__ == "__main__":
    main()
