"""Liveness endpoint."""
import json

from fastapi import APIRouter
from fastapi.responses import Response


router = APIRouter(tags=["Health"])

HEALTH_BODY = {"status": "UP", "message": "Сервер работает корректно."}


@router.get("/health")
async def health_check() -> Response:
    """健康检查端点"""
    return Response(
        content=json.dumps(HEALTH_BODY, ensure_ascii=False),
        status_code=200,
        media_type="application/json",
    )
