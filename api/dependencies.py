"""
API依赖项 - 认证、支付网关注入与服务装配
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from application.dto import UserResponseDTO
from application.ports.payment_gateway import PaymentGateway
from application.services.consultant_service import ConsultantService
from application.services.payment_service import PaymentService
from application.services.product_service import ProductService
from application.services.token_service import TokenClaims
from application.services.user_service import UserApplicationService
from core.exceptions import UnauthorizedException
from infrastructure.external.payments import get_payment_gateway as build_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


# HTTP Bearer，缺失凭据时由依赖自行抛出统一的 401
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="Access token returned by POST /api/v1/auth/login",
    auto_error=False,
)


@dataclass(frozen=True)
class AuthContext:
    """当前请求的认证上下文"""
    user: UserResponseDTO
    claims: TokenClaims


async def get_user_service() -> UserApplicationService:
    return UserApplicationService(uow_factory=SQLAlchemyUnitOfWork)


async def get_optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    service: UserApplicationService = Depends(get_user_service),
) -> Optional[AuthContext]:
    """未携带令牌时返回 None；携带了无效令牌仍然 401"""
    if not credentials or not credentials.credentials:
        return None
    user, claims = await service.authenticate(credentials.credentials)
    return AuthContext(user=user, claims=claims)


async def get_auth_context(
    auth: Optional[AuthContext] = Depends(get_optional_auth),
) -> AuthContext:
    if auth is None:
        raise UnauthorizedException()
    return auth


async def get_current_user(auth: AuthContext = Depends(get_auth_context)) -> UserResponseDTO:
    """获取当前登录用户"""
    return auth.user


def get_payment_gateway() -> PaymentGateway:
    """支付网关（测试中通过 app.dependency_overrides 替换）"""
    return build_payment_gateway()


async def get_idempotency_key(
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=255),
) -> Optional[str]:
    return idempotency_key or None


async def get_payment_service(gateway: PaymentGateway = Depends(get_payment_gateway)) -> PaymentService:
    return PaymentService(gateway)


async def get_product_service(gateway: PaymentGateway = Depends(get_payment_gateway)) -> ProductService:
    return ProductService(gateway)


async def get_consultant_service(gateway: PaymentGateway = Depends(get_payment_gateway)) -> ConsultantService:
    return ConsultantService(gateway)
