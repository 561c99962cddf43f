"""
自定义异常映射与全局异常处理器
"""
import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse
from starlette import status as http_status

from .response import error_response
from shared.codes import ResponseMessage
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException


class UnauthorizedException(BusinessException):
    """未授权异常"""

    def __init__(self, message: str = ResponseMessage.UNAUTHORIZED):
        super().__init__(
            code=http_status.HTTP_401_UNAUTHORIZED,
            message=message,
            error_type="Unauthorized",
        )


class TokenExpiredException(BusinessException):
    """Token过期异常"""

    def __init__(self):
        super().__init__(
            code=http_status.HTTP_401_UNAUTHORIZED,
            message="Token expired",
            error_type="TokenExpired",
        )


# HTTP 状态码到默认消息的映射（HTTPException 未提供 detail 时使用）
_DEFAULT_MESSAGES = {
    400: ResponseMessage.BAD_REQUEST,
    401: ResponseMessage.UNAUTHORIZED,
    403: ResponseMessage.FORBIDDEN,
    404: ResponseMessage.NOT_FOUND,
    409: ResponseMessage.CONFLICT,
    429: ResponseMessage.TOO_MANY_REQUESTS,
    500: ResponseMessage.INTERNAL_SERVER_ERROR,
    503: ResponseMessage.SERVICE_UNAVAILABLE,
}


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", object()), "request_id", None) or str(uuid.uuid4())


def register_exception_handlers(app: FastAPI):
    """
    注册全局异常处理器

    Args:
        app: FastAPI应用实例
    """

    logger = get_logger(__name__)

    @app.exception_handler(BusinessException)
    async def business_exception_handler(request: Request, exc: BusinessException):
        """处理业务异常（code 即 HTTP 状态码）"""
        request_id = _request_id(request)
        response = error_response(
            code=exc.code,
            message=exc.message,
            error_type=exc.error_type,
            details=exc.details,
            field=exc.field,
            request_id=request_id,
            result=jsonable_encoder(exc.result),
        )
        if exc.code >= 500:
            logger.error(
                "business_exception",
                request_id=request_id,
                error_type=exc.error_type,
                status_code=exc.code,
                error=exc.message,
            )
        else:
            logger.info(
                "business_exception",
                request_id=request_id,
                error_type=exc.error_type,
                status_code=exc.code,
                error=exc.message,
            )
        # 对于401返回WWW-Authenticate
        headers = {"WWW-Authenticate": "Bearer"} if exc.code == http_status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(status_code=exc.code, content=response.model_dump(mode='json'), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """处理参数验证异常（统一返回 400）"""
        errors = jsonable_encoder(exc.errors())

        # 提取第一个错误的字段与原因
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])

        response = error_response(
            code=http_status.HTTP_400_BAD_REQUEST,
            message=f"{ResponseMessage.BAD_REQUEST}: {first_error.get('msg', 'invalid payload')}",
            error_type="ValidationError",
            details={"errors": errors},
            field=field or None,
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode='json')
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """处理HTTP异常（路由不存在、方法不允许等）"""
        message = exc.detail if isinstance(exc.detail, str) and exc.detail else None
        response = error_response(
            code=exc.status_code,
            message=message or _DEFAULT_MESSAGES.get(exc.status_code, ResponseMessage.BAD_REQUEST),
            error_type="HTTPError",
            request_id=_request_id(request),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(mode='json'),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """处理所有未捕获的异常"""
        request_id = _request_id(request)

        # 开发环境返回详细错误信息
        details = None
        if app.debug:
            details = {
                "exception": str(exc),
                "traceback": traceback.format_exc()
            }

        response = error_response(
            code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=ResponseMessage.INTERNAL_SERVER_ERROR,
            error_type="SystemError",
            details=details,
            request_id=request_id,
        )

        logger.error(
            "unhandled_exception",
            request_id=request_id,
            error=str(exc),
            exc_info=True,
        )

        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(mode='json')
        )
