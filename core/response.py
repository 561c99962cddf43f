"""
统一响应格式定义

信封结构：``{code, message, result?}``，其中 ``code`` 与 HTTP 状态码一致；
错误响应额外携带 ``error`` 详情（类型、字段、request_id 等）。
"""
from typing import Any, Optional, Generic, TypeVar
from pydantic import BaseModel, Field, field_serializer
from datetime import datetime, timezone
from starlette import status as http_status

from shared.codes import ResponseMessage


T = TypeVar("T")


class ErrorDetail(BaseModel):
    """错误详情"""
    type: str
    details: Optional[dict] = None
    field: Optional[str] = None
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
        return ts.isoformat().replace("+00:00", "Z")


class Response(BaseModel, Generic[T]):
    """统一响应模型"""
    code: int
    message: str
    result: Optional[T] = None


class ErrorResponse(Response[Any]):
    """错误响应模型"""
    error: ErrorDetail


def success_response(
    result: Any = None,
    message: str = ResponseMessage.OK,
    code: int = http_status.HTTP_200_OK,
) -> Response:
    """
    创建成功响应

    Args:
        result: 返回数据
        message: 成功消息
        code: HTTP 状态码

    Returns:
        Response: 统一响应对象
    """
    return Response(code=code, message=str(message), result=result)


def created_response(result: Any = None) -> Response:
    """创建 201 响应"""
    return success_response(
        result=result,
        message=ResponseMessage.CREATED,
        code=http_status.HTTP_201_CREATED,
    )


def error_response(
    code: int,
    message: str,
    error_type: str = "BusinessError",
    details: Optional[dict] = None,
    field: Optional[str] = None,
    request_id: Optional[str] = None,
    result: Any = None,
) -> ErrorResponse:
    """
    创建错误响应

    Args:
        code: HTTP 状态码
        message: 错误消息
        error_type: 错误类型
        details: 错误详情
        field: 错误字段
        request_id: 请求ID
        result: 需要回显给调用方的数据

    Returns:
        ErrorResponse: 统一错误响应对象
    """
    return ErrorResponse(
        code=code,
        message=str(message),
        result=result,
        error=ErrorDetail(
            type=error_type,
            details=details,
            field=field,
            request_id=request_id,
        ),
    )
