"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Room Chat Broker")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)

    # 监听配置（端口可由命令行第一个参数覆盖）
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=1401, ge=0, le=65535)

    # 聊天配置
    DEFAULT_ROOM: str = Field(default="public")

    # 每连接发送队列及溢出策略
    WS_SEND_QUEUE_MAX: int = Field(default=100, ge=1)
    WS_SEND_OVERFLOW_POLICY: str = Field(default="drop_oldest")  # drop_oldest | drop_new | disconnect
    SHUTDOWN_DRAIN_TIMEOUT: float = Field(default=2.0, ge=0)

    # 日志级别（为空时按 DEBUG 推断）
    LOG_LEVEL: Optional[str] = Field(default=None)

    # CORS配置
    CORS_ORIGINS: list = Field(
        default=["http://localhost:1401", "http://127.0.0.1:1401"],
    )

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("DEFAULT_ROOM", mode="after")
    @classmethod
    def _validate_default_room(cls, v: str) -> str:
        room = v.strip()
        if not room:
            raise ValueError("DEFAULT_ROOM must not be empty")
        return room

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """允许 JSON 字符串或逗号分隔字符串两种格式。"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                import json
                try:
                    arr = json.loads(s)
                    if isinstance(arr, list):
                        return arr
                except Exception:
                    pass
            if "," in s:
                return [item.strip() for item in s.split(",") if item.strip()]
            return [s]
        return v


settings = Settings()
