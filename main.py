"""
FastAPI应用主入口

聊天服务：``/chat`` WebSocket + ``/health`` 健康检查。
启动：``chat-broker [port]``（默认端口 1401）。
"""
import argparse
import sys
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import chat as chat_routes
from api.routes import health as health_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from application.services.chat_engine import ChatEngine
from core.config import settings, Settings
from core.exceptions import register_exception_handlers
from core.logging_config import get_logger, configure_logging


logger = get_logger(__name__)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build an application with its own chat engine."""
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用生命周期管理"""
        engine = ChatEngine(
            default_room=cfg.DEFAULT_ROOM,
            send_queue_max=cfg.WS_SEND_QUEUE_MAX,
            overflow_policy=cfg.WS_SEND_OVERFLOW_POLICY,
            drain_timeout=cfg.SHUTDOWN_DRAIN_TIMEOUT,
        )
        app.state.chat_engine = engine
        logger.info("chat_engine_initialized", default_room=cfg.DEFAULT_ROOM)
        yield
        await engine.shutdown()
        logger.info("application_shutdown", message="Application shutdown")

    app = FastAPI(
        title=cfg.PROJECT_NAME,
        version=cfg.VERSION,
        debug=cfg.DEBUG,
        lifespan=lifespan,
        description="多用户房间聊天服务（WebSocket）",
    )

    # 添加中间件（注意顺序：从下往上执行）
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_routes.router)
    app.include_router(chat_routes.router)
    return app


app = create_app()


def _port(value: str) -> int:
    try:
        port = int(value, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chat-broker", description="Room chat broker over WebSocket")
    parser.add_argument("port", nargs="?", type=_port, default=settings.PORT, help=f"TCP port (default {settings.PORT})")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    import uvicorn

    args = parse_args(argv)
    # 初始化日志：在入口处显式配置，避免模块导入时的副作用
    configure_logging()
    logger.info("server_starting", host=settings.HOST, port=args.port)
    try:
        uvicorn.run(
            app,
            host=settings.HOST,
            port=args.port,
            log_level="debug" if settings.DEBUG else "info",
            log_config=None,
        )
    except OSError as exc:
        logger.error("server_start_failed", port=args.port, error=str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
