"""
请求/响应日志中间件

记录每个请求的方法、路径、查询参数与耗时；JSON 请求体在脱敏后记录：
凭据类字段整体替换，邮箱只保留首字符与域名。
"""
import json
import time
from typing import Any, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from core.logging_config import get_logger
from core.config import settings


logger = get_logger(__name__)

REDACTED = "***"

# 小写字段名
SECRET_FIELDS = frozenset({"password", "token", "secret", "api_key", "access_token", "authorization"})
EMAIL_FIELDS = frozenset({"email", "customeremail"})


def mask_email(value: Any) -> Any:
    if not isinstance(value, str) or "@" not in value:
        return value
    local, _, domain = value.partition("@")
    return f"{local[:1]}***@{domain}"


def sanitize(data: Any) -> Any:
    if isinstance(data, dict):
        cleaned = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if lowered in SECRET_FIELDS:
                cleaned[key] = REDACTED
            elif lowered in EMAIL_FIELDS:
                cleaned[key] = mask_email(value)
            else:
                cleaned[key] = sanitize(value)
        return cleaned
    if isinstance(data, list):
        return [sanitize(item) for item in data]
    return data


class LoggingMiddleware(BaseHTTPMiddleware):

    SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}
    BODY_METHODS = {"POST", "PUT", "PATCH"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.max_body_bytes = settings.LOG_REQUEST_BODY_MAX_BYTES

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        info: dict[str, Any] = {"method": request.method, "path": request.url.path}
        if request.query_params:
            info["query_params"] = dict(request.query_params)
        body = await self._body_for_log(request)
        if body is not None:
            info["body"] = body
        logger.info("request_started", **info)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                duration=round(time.perf_counter() - started, 4),
                error_type=type(exc).__name__,
                exc_info=True,
                **info,
            )
            raise

        duration = time.perf_counter() - started
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        self._log_completed(response, round(duration, 4), info)
        return response

    def _body_logging_enabled(self, request: Request) -> bool:
        # X-Log-Body 请求头可覆盖默认开关
        override = (request.headers.get("X-Log-Body") or "").lower()
        if override in {"true", "1", "yes"}:
            return True
        if override in {"false", "0", "no"}:
            return False
        return settings.LOG_REQUEST_BODY_ENABLE_BY_DEFAULT and settings.DEBUG

    async def _body_for_log(self, request: Request) -> Optional[Any]:
        if request.method not in self.BODY_METHODS or not self._body_logging_enabled(request):
            return None
        raw = await request.body()
        if not raw:
            return None
        content_type = request.headers.get("content-type", "").lower()
        # 非 JSON 请求体无法脱敏，只记录大小
        if "application/json" not in content_type or len(raw) > self.max_body_bytes:
            return {"content_type": content_type, "bytes": len(raw)}
        try:
            return sanitize(json.loads(raw))
        except ValueError:
            return {"content_type": content_type, "bytes": len(raw), "invalid_json": True}

    @staticmethod
    def _log_completed(response: Response, duration: float, info: dict) -> None:
        status_code = response.status_code
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.info
        log("request_completed", status_code=status_code, duration=duration, **info)
