"""
请求上下文中间件

为每个请求确定 request_id（透传合法的上游值，否则生成），并把
request_id、客户端 IP 以及支付请求携带的 Idempotency-Key 绑定到
structlog contextvars，使网关调用日志可以按请求/幂等键关联。
"""
import re
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


# 上游传入的 ID 只接受安全字符，避免日志注入
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestIDMiddleware(BaseHTTPMiddleware):

    HEADER_NAME = "X-Request-ID"
    IDEMPOTENCY_HEADER = "Idempotency-Key"

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(self.HEADER_NAME, "")
        request_id = incoming if _SAFE_REQUEST_ID.match(incoming) else uuid.uuid4().hex

        request.state.request_id = request_id
        context = {"request_id": request_id, "client_ip": self._client_ip(request)}
        idempotency_key = request.headers.get(self.IDEMPOTENCY_HEADER)
        if idempotency_key:
            context["idempotency_key"] = idempotency_key[:255]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)

        response = await call_next(request)
        response.headers[self.HEADER_NAME] = request_id
        return response

    @staticmethod
    def _client_ip(request: Request) -> str:
        """优先代理头（X-Forwarded-For 取第一跳）"""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")
