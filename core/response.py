"""
统一错误响应格式定义
"""
from typing import Optional
from pydantic import BaseModel, Field, field_serializer
from datetime import datetime, timezone
from shared.codes import ChatErrorCode


class ErrorDetail(BaseModel):
    """错误详情"""
    type: str
    details: Optional[dict] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        """序列化时间戳为 UTC ISO8601，统一使用 Z 结尾"""
        ts = timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        else:
            ts = ts.astimezone(timezone.utc)
        s = ts.isoformat()
        return s.replace("+00:00", "Z")


class ErrorResponse(BaseModel):
    """统一错误响应模型"""
    code: int
    message: str
    error: ErrorDetail


def error_response(
    code: int,
    message: str,
    error_type: str = "ChatError",
    details: Optional[dict] = None,
    request_id: Optional[str] = None,
) -> ErrorResponse:
    """
    创建错误响应

    Args:
        code: 错误码
        message: 错误消息
        error_type: 错误类型
        details: 错误详情
        request_id: 请求ID

    Returns:
        ErrorResponse: 统一错误响应对象
    """
    return ErrorResponse(
        code=code,
        message=message,
        error=ErrorDetail(
            type=error_type,
            details=details,
            request_id=request_id,
        ),
    )


__all__ = ["ErrorDetail", "ErrorResponse", "error_response"]
