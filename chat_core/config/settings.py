"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class ChatSettings(BaseSettings):
    """聊天客户端配置。"""

    # ---- 回复来源 ----
    reply_source: Literal["simulated", "remote"] = Field(
        default="simulated",
        description="回复来源：simulated 为本地模拟回复，remote 为远程推理服务",
    )
    remote_endpoint: str = Field(
        default="http://localhost:8000/chat",
        description="远程推理服务的 POST 地址",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")
    simulated_delay: float = Field(default=0.7, ge=0.0, description="模拟回复的延迟（秒）")

    # ---- 会话展示 ----
    bot_name: str = Field(default="Bot", description="机器人显示名")
    default_user_name: str = Field(default="You", description="名字为空时使用的用户名")
    welcome_text: str = Field(default="ようこそ！簡単なチャットです。", description="会话初始欢迎语")
    failure_text: str = Field(
        default="エラーが発生しました。もう一度お試しください。",
        description="回复失败时展示的固定文本",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("remote_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("remote_endpoint must be an http(s) URL")
        return v

    @field_validator("bot_name", "default_user_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = ChatSettings()
