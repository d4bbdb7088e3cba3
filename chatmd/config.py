from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    base_url: str
    model: str
    timeout_s: float
    max_retries: int
    stream_delay_s: float
    disable_math: bool
    log_level: str


def _strip_quotes(value: str) -> str:
    # Users often set env vars with quotes (e.g. cmd.exe: set CHAT_API_KEY="sk-...").
    if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
        return value[1:-1].strip()
    return value


def load_settings() -> Settings:
    api_key = (
        os.environ.get("CHAT_API_KEY")
        or os.environ.get("DEEPSEEK_API_KEY")
        or os.environ.get("OPENAI_API_KEY")
        or ""
    ).strip()
    api_key = _strip_quotes(api_key) or None

    base_url = (
        os.environ.get("CHAT_BASE_URL")
        or os.environ.get("DEEPSEEK_BASE_URL")
        or os.environ.get("OPENAI_BASE_URL")
        or "https://api.deepseek.com/v1"
    ).strip().rstrip("/")
    # The OpenAI-compatible DeepSeek endpoint lives under /v1.
    if "api.deepseek.com" in base_url and not base_url.endswith("/v1"):
        base_url = base_url + "/v1"
    model = (
        os.environ.get("CHAT_MODEL")
        or os.environ.get("DEEPSEEK_MODEL")
        or os.environ.get("OPENAI_MODEL")
        or "deepseek-chat"
    ).strip()

    timeout_s = float(os.environ.get("CHAT_LLM_TIMEOUT_S", "60"))
    max_retries = int(os.environ.get("CHAT_LLM_MAX_RETRIES", "2"))
    stream_delay_s = float(os.environ.get("CHAT_STREAM_DELAY_S", "0.03"))
    disable_math = (os.environ.get("CHAT_DISABLE_MATH") or "").strip().lower() in _TRUTHY
    log_level = (os.environ.get("CHAT_LOG_LEVEL") or "INFO").strip().upper()

    return Settings(
        api_key=api_key,
        base_url=base_url,
        model=model,
        timeout_s=timeout_s,
        max_retries=max_retries,
        stream_delay_s=stream_delay_s,
        disable_math=disable_math,
        log_level=log_level,
    )
