from chatmd.chat_store import (
    NO_RESPONSE_TEXT,
    REGENERATE_ERROR_TEXT,
    SEND_ERROR_TEXT,
    ChatStore,
)


class FakeClient:
    def __init__(self, pieces=None, error=None):
        self.pieces = list(pieces or [])
        self.error = error
        self.calls = []

    def chat_stream(self, messages, *, session_id=None, **kwargs):
        self.calls.append({"messages": list(messages), "session_id": session_id, **kwargs})
        for p in self.pieces:
            yield p
        if self.error is not None:
            raise self.error


def test_send_message_streams_into_new_conversation():
    store = ChatStore()
    client = FakeClient(["Hi", "", "!"])
    assert list(store.send_message("Hello there", client)) == ["Hi", "!"]

    conv = store.current_conversation()
    assert conv is not None
    assert conv.title == "Hello there"
    assert [m.role for m in conv.messages] == ["user", "assistant"]
    assert conv.messages[1].content == "Hi!"
    assert conv.messages[1].is_streaming is False
    assert store.is_loading is False
    assert client.calls[0]["messages"] == [{"role": "user", "content": "Hello there"}]
    assert client.calls[0]["session_id"] == conv.session_id


def test_long_first_message_truncates_title():
    store = ChatStore()
    list(store.send_message("a" * 60, FakeClient(["ok"])))
    assert store.current_conversation().title == "a" * 50 + "..."


def test_history_includes_previous_exchange():
    store = ChatStore()
    client = FakeClient(["one"])
    list(store.send_message("first", client))
    list(store.send_message("second", client))
    assert client.calls[1]["messages"] == [
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "one"},
        {"role": "user", "content": "second"},
    ]
    assert store.current_conversation().title == "first"


def test_stream_options_are_forwarded():
    store = ChatStore()
    client = FakeClient(["ok"])
    list(store.send_message("hi", client, temperature=0.5, max_tokens=64))
    assert client.calls[0]["temperature"] == 0.5
    assert client.calls[0]["max_tokens"] == 64


def test_empty_reply_gets_placeholder_text():
    store = ChatStore()
    list(store.send_message("hi", FakeClient([])))
    assert store.current_conversation().messages[-1].content == NO_RESPONSE_TEXT


def test_client_error_becomes_apology():
    store = ChatStore()
    list(store.send_message("hi", FakeClient(["Part"], error=ConnectionError("down"))))
    reply = store.current_conversation().messages[-1]
    assert reply.content == "Part" + SEND_ERROR_TEXT
    assert reply.is_streaming is False
    assert "down" in store.error
    store.clear_error()
    assert store.error is None


def test_send_is_ignored_while_busy():
    store = ChatStore()
    store.is_loading = True
    client = FakeClient(["x"])
    assert list(store.send_message("hi", client)) == []
    assert client.calls == []
    assert store.current_conversation() is None


def test_blank_message_is_ignored():
    store = ChatStore()
    assert list(store.send_message("   ", FakeClient(["x"]))) == []
    assert store.current_conversation() is None


def test_regenerate_replaces_assistant_reply():
    store = ChatStore()
    list(store.send_message("question", FakeClient(["old"])))
    old = store.current_conversation().messages[-1]

    client = FakeClient(["new"])
    assert list(store.regenerate_response(old.id, client)) == ["new"]
    msgs = store.current_conversation().messages
    assert len(msgs) == 2
    assert msgs[-1].content == "new"
    assert msgs[-1].id != old.id
    assert client.calls[0]["messages"] == [{"role": "user", "content": "question"}]


def test_regenerate_error_text():
    store = ChatStore()
    list(store.send_message("question", FakeClient(["old"])))
    old = store.current_conversation().messages[-1]
    list(store.regenerate_response(old.id, FakeClient(error=RuntimeError("x"))))
    assert store.current_conversation().messages[-1].content == REGENERATE_ERROR_TEXT


def test_regenerate_needs_preceding_user_message():
    store = ChatStore()
    list(store.send_message("question", FakeClient(["old"])))
    user = store.current_conversation().messages[0]
    client = FakeClient(["new"])
    assert list(store.regenerate_response(user.id, client)) == []
    assert client.calls == []


def test_delete_current_conversation_moves_selection():
    store = ChatStore()
    a = store.create_conversation()
    b = store.create_conversation()
    assert store.current_conversation_id == b
    assert store.delete_conversation(b) == a
    assert store.delete_conversation(a) is None
    assert store.list_conversations() == []


def test_select_unknown_conversation():
    store = ChatStore()
    a = store.create_conversation()
    assert store.select_conversation("missing") is False
    assert store.current_conversation_id == a


def test_update_title():
    store = ChatStore()
    a = store.create_conversation()
    assert store.update_conversation_title(a, "Renamed\nchat")
    assert store.get_conversation(a).title == "Renamed chat"
    assert store.update_conversation_title(a, "  ") is False


def test_append_only_grows_streaming_reply():
    store = ChatStore()
    list(store.send_message("hi", FakeClient(["done"])))
    conv_id = store.current_conversation_id
    store.append_to_last_message(conv_id, "more")
    assert store.get_messages(conv_id)[-1].content == "done"


def test_cleanup_drops_interrupted_reply():
    store = ChatStore()
    gen = store.send_message("hi", FakeClient(["a", "b"]))
    assert next(gen) == "a"
    assert store.is_loading is True

    store.cleanup_streaming_messages()
    gen.close()
    msgs = store.current_conversation().messages
    assert [m.role for m in msgs] == ["user"]
    assert store.is_loading is False
