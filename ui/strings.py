S = {
    "title": "chatmd",
    "settings": "Settings",
    "history": "Conversations",
    "new_chat": "New chat",
    "del_chat": "Delete",
    "confirm_delete": "Delete this conversation?",
    "confirm": "Delete",
    "cancel": "Cancel",
    "no_msgs": "Start a conversation by typing a message below.",
    "prompt": "Type your message...",
    "generating": "Generating",
    "regenerate": "Regenerate",
    "dismiss": "Dismiss",
    "disable_math": "Disable math rendering",
    "temp": "Temperature",
    "max_tokens": "Max tokens",
    "model": "Model / key",
    "key_missing": "API key not set (CHAT_API_KEY, DEEPSEEK_API_KEY or OPENAI_API_KEY). Restart Streamlit after setting it.",
    "key_set": "API key: set",
    "source": "Markdown source",
    "download_html": "Download HTML",
}
