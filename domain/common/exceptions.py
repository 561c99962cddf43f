"""领域层业务异常定义，供领域与基础设施使用。

异常的 ``code`` 即 HTTP 状态码（响应信封中的 code 与之保持一致）。
核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Any, Optional

from shared.codes import ResponseMessage


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        result: Any = None,
    ) -> None:
        self.code = code
        self.message = str(message)
        self.error_type = error_type
        self.details = details
        self.field = field
        # 部分失败场景需要在响应信封中回显数据（如支付未完成时的会话详情）
        self.result = result
        super().__init__(self.message)


class ValidationException(BusinessException):
    def __init__(
        self,
        message: str = ResponseMessage.BAD_REQUEST,
        *,
        field: Optional[str] = None,
        details: Optional[dict] = None,
        result: Any = None,
    ):
        super().__init__(
            code=400,
            message=message,
            error_type="ValidationError",
            details=details,
            field=field,
            result=result,
        )


class DomainValidationException(ValidationException):
    """领域规则校验失败（金额、百分比等）"""

    def __init__(self, message: str, *, field: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, field=field, details=details)
        self.error_type = "DomainValidationError"


class NotFoundException(BusinessException):
    def __init__(self, message: str = ResponseMessage.NOT_FOUND, *, details: Optional[dict] = None):
        super().__init__(
            code=404,
            message=message,
            error_type="NotFound",
            details=details,
        )


class ConflictException(BusinessException):
    def __init__(
        self,
        message: str = ResponseMessage.CONFLICT,
        *,
        status_code: int = 409,
        field: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(
            code=status_code,
            message=message,
            error_type="Conflict",
            details=details,
            field=field,
        )


class GatewayException(BusinessException):
    """支付网关返回的错误（状态码与消息透传，缺省为 500）"""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        kind: Optional[str] = None,
        provider_code: Optional[str] = None,
    ):
        super().__init__(
            code=status_code or 500,
            message=message or ResponseMessage.INTERNAL_SERVER_ERROR,
            error_type="GatewayError",
            details={"kind": kind, "provider_code": provider_code},
        )
        self.kind = kind
        self.provider_code = provider_code


class InternalException(BusinessException):
    def __init__(self, message: str = ResponseMessage.INTERNAL_SERVER_ERROR):
        super().__init__(code=500, message=message, error_type="InternalError")


class UserNotFoundException(NotFoundException):
    def __init__(self, user_id: Optional[str] = None):
        details = {"user_id": user_id} if user_id else None
        super().__init__(details=details)
        self.error_type = "UserNotFound"


class UserAlreadyExistsException(ConflictException):
    """注册时邮箱已存在"""

    def __init__(self, email: str):
        super().__init__(field="email", details={"email": email})
        self.error_type = "UserAlreadyExists"


class EmailAlreadyExistsException(ConflictException):
    """更新用户时邮箱被其他用户占用"""

    def __init__(self, email: str):
        super().__init__(
            "Email already exists",
            status_code=400,
            field="email",
            details={"email": email},
        )
        self.error_type = "EmailAlreadyExists"


class InvalidCredentialsException(BusinessException):
    def __init__(self):
        super().__init__(
            code=400,
            message="Invalid user credentials",
            error_type="InvalidCredentials",
        )
