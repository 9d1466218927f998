from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_LLM_BASE_URL = "https://models.inference.ai.azure.com"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class AppConfig:
    telegram_token: str
    allowed_user_ids: frozenset[int]
    llm_base_url: str
    llm_api_key: str
    llm_default_model: str
    llm_default_temperature: float
    llm_timeout_sec: int
    llm_history_limit: int
    llm_system_prompt: str


def load_dotenv(path: str | Path) -> dict[str, str]:
    env_path = Path(path)
    if not env_path.exists():
        return {}
    result: dict[str, str] = {}
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        if len(value) >= 2 and ((value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'"))):
            value = value[1:-1]
        result[key] = value
    return result


def parse_allowed_user_ids(raw: str) -> frozenset[int]:
    ids: set[int] = set()
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            ids.add(int(item))
        except ValueError:
            raise ConfigError(f"ALLOWED_USER_IDS contains a non-numeric id: {item!r}") from None
    if not ids:
        raise ConfigError("ALLOWED_USER_IDS is empty")
    return frozenset(ids)


def _require(env: Mapping[str, str], key: str) -> str:
    value = str(env.get(key, "")).strip()
    if not value:
        raise ConfigError(f"{key} is not set")
    return value


def _number(env: Mapping[str, str], key: str, default: float, cast: type) -> float:
    raw = str(env.get(key, "")).strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None


def load_config(env: Mapping[str, str]) -> AppConfig:
    return AppConfig(
        telegram_token=_require(env, "TELEGRAM_TOKEN"),
        allowed_user_ids=parse_allowed_user_ids(_require(env, "ALLOWED_USER_IDS")),
        llm_base_url=str(env.get("LLM_BASE_URL", "")).strip() or DEFAULT_LLM_BASE_URL,
        llm_api_key=str(env.get("LLM_API_KEY", "")).strip(),
        llm_default_model=str(env.get("LLM_DEFAULT_MODEL", "")).strip() or DEFAULT_MODEL,
        llm_default_temperature=float(_number(env, "LLM_DEFAULT_TEMPERATURE", DEFAULT_TEMPERATURE, float)),
        llm_timeout_sec=int(_number(env, "LLM_TIMEOUT_SEC", 600, int)),
        llm_history_limit=int(_number(env, "LLM_HISTORY_LIMIT", 20, int)),
        llm_system_prompt=str(env.get("LLM_SYSTEM_PROMPT", "")).strip(),
    )


def load_environment(dotenv_path: str | Path) -> dict[str, str]:
    """Values from the ``.env`` file, overridden by the real process environment."""
    values = load_dotenv(dotenv_path)
    values.update(os.environ)
    return values
