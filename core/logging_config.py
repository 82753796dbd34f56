"""
Structlog 日志配置模块

structlog 与标准库 logging（含 uvicorn）共用一条处理链：
DEBUG 下彩色控制台输出，其余环境输出单行 JSON。
"""
import json
import logging
from typing import Any, List, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level
from structlog.stdlib import ProcessorFormatter

from core.config import settings, Settings


def _json_dumps(obj: Any, default=None, **kwargs) -> str:
    # structlog 会透传 default/sort_keys 等参数；聊天内容多为西里尔字母，不做转义
    return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)


def get_renderer(app_settings: Optional[Settings] = None) -> Any:
    """DEBUG 用 ConsoleRenderer，否则 JSONRenderer。"""
    cfg = app_settings or settings
    if cfg.DEBUG:
        return ConsoleRenderer(colors=True)
    return JSONRenderer(serializer=_json_dumps)


def _resolve_level(cfg: Settings) -> int:
    if cfg.LOG_LEVEL:
        level = logging.getLevelName(cfg.LOG_LEVEL.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if cfg.DEBUG else logging.INFO


def _pre_chain() -> List[Any]:
    return [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(app_settings: Optional[Settings] = None) -> None:
    """在入口处调用一次；重复调用会替换根 logger 的 handler。"""
    cfg = app_settings or settings
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer(cfg)],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(cfg))


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)
