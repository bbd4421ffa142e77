from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from chatgpt_session.client import (
    DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    DEFAULT_API_BASE_URL,
    DEFAULT_BACKEND_API_BASE_URL,
    DEFAULT_USER_AGENT,
    ChatGPTAPI,
)

SESSION_TOKEN_ENV_VAR = "CHATGPT_SESSION_TOKEN"


@dataclass
class RuntimeEnv:
    session_token: str
    session_token_env_var: str


@dataclass
class AppConfig:
    markdown: bool
    api_base_url: str
    backend_api_base_url: str
    user_agent: str
    access_token_ttl_seconds: float
    request_timeout_seconds: float
    conversation_id: str | None
    parent_message_id: str | None
    startup_auth_retries: int
    log_level: str
    log_consumers: list | None


def load_json_config(config_path: Path | None = None) -> dict:
    config_path = config_path or Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def _to_bool(value: object, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(value)


def _optional_str(value: object) -> str | None:
    return str(value or "").strip() or None


def parse_app_config(config: dict) -> AppConfig:
    return AppConfig(
        markdown=_to_bool(config.get("Markdown", True), default=True),
        api_base_url=config.get("ApiBaseUrl", DEFAULT_API_BASE_URL),
        backend_api_base_url=config.get("BackendApiBaseUrl", DEFAULT_BACKEND_API_BASE_URL),
        user_agent=config.get("UserAgent", DEFAULT_USER_AGENT),
        access_token_ttl_seconds=float(config.get("AccessTokenTtlSeconds", DEFAULT_ACCESS_TOKEN_TTL_SECONDS)),
        request_timeout_seconds=float(config.get("RequestTimeoutSeconds", 120)),
        conversation_id=_optional_str(config.get("ConversationId")),
        parent_message_id=_optional_str(config.get("ParentMessageId")),
        startup_auth_retries=max(1, int(config.get("StartupAuthRetries", 3))),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env() -> RuntimeEnv:
    return RuntimeEnv(
        session_token=os.environ.get(SESSION_TOKEN_ENV_VAR, "").strip(),
        session_token_env_var=SESSION_TOKEN_ENV_VAR,
    )


def build_client(app_config: AppConfig, runtime_env: RuntimeEnv) -> ChatGPTAPI:
    return ChatGPTAPI(
        runtime_env.session_token,
        markdown=app_config.markdown,
        api_base_url=app_config.api_base_url,
        backend_api_base_url=app_config.backend_api_base_url,
        user_agent=app_config.user_agent,
        access_token_ttl=app_config.access_token_ttl_seconds,
        timeout=app_config.request_timeout_seconds,
    )
