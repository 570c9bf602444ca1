from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000


class LLMConfig(BaseModel):
    enabled: bool = True
    endpoint: str = "https://api.siliconflow.cn/v1/chat/completions"
    api_key: str = ""
    model: str = "Qwen/QwQ-32B"
    timeout_seconds: int = 60
    temperature: float = 0.9
    presence_penalty: float = 0.2
    note_max_tokens: int = 520
    review_max_tokens: int = 420
    note_max_length: int = 500


class PublishConfig(BaseModel):
    endpoint: str = "https://note.limyai.com/api/openapi/publish_note"
    api_key: str = ""
    timeout_seconds: int = 30


class CORSConfig(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    allow_methods: list[str] = Field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    allow_headers: list[str] = Field(default_factory=lambda: ["Content-Type", "Authorization"])


class RuntimeConfig(BaseModel):
    log_level: str = "INFO"
    static_dir: str = ""


class Settings(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
    cors: CORSConfig = Field(default_factory=CORSConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


# ${NAME} or ${NAME:-fallback}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _load_dotenv(project_root: Path) -> None:
    dotenv_path = project_root / ".env"
    if not dotenv_path.exists():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _substitute_env_var(match: re.Match[str]) -> str:
    value = os.getenv(match.group(1), "")
    if value:
        return value
    return match.group(2) or ""


def _expand_env_vars(payload: object) -> object:
    if isinstance(payload, dict):
        return {key: _expand_env_vars(value) for key, value in payload.items()}
    if isinstance(payload, list):
        return [_expand_env_vars(item) for item in payload]
    if isinstance(payload, str):
        return _ENV_VAR_PATTERN.sub(_substitute_env_var, payload)
    return payload


def _resolve_config_path() -> Path:
    project_root = _project_root()
    _load_dotenv(project_root)

    env_path = os.getenv("COPYDESK_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()

    default_path = project_root / "config.yaml"
    if default_path.exists():
        return default_path

    fallback = project_root / "config.example.yaml"
    return fallback


def load_settings() -> Settings:
    config_path = _resolve_config_path()
    if not config_path.exists():
        return Settings()

    with config_path.open("r", encoding="utf-8") as fp:
        raw = yaml.safe_load(fp) or {}
    expanded = _expand_env_vars(raw)
    return Settings.model_validate(expanded)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_config_path() -> Path:
    return _resolve_config_path()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
