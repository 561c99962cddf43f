"""
认证API路由 - 注册、登录、当前用户与登出
"""
from typing import Optional

from fastapi import APIRouter, Depends

from application.dto import RegisterDTO, LoginDTO, UserResponseDTO, AccessTokenDTO
from application.services.user_service import UserApplicationService
from api.dependencies import AuthContext, get_auth_context, get_optional_auth, get_user_service
from core.exceptions import UnauthorizedException
from core.response import success_response, Response as ApiResponse


router = APIRouter(
    prefix="/auth",
    tags=["认证"]
)


@router.post("/register", summary="用户注册", response_model=ApiResponse[UserResponseDTO])
async def register(
    data: RegisterDTO,
    auth: Optional[AuthContext] = Depends(get_optional_auth),
    service: UserApplicationService = Depends(get_user_service),
):
    """
    注册新用户

    系统中尚无用户时允许匿名注册（初始化首个账号），之后需要携带访问令牌。
    邮箱已存在返回 409。
    """
    if auth is None and await service.has_users():
        raise UnauthorizedException()
    user = await service.register_user(data)
    return success_response(result=user)


@router.post("/login", summary="用户登录", response_model=ApiResponse[AccessTokenDTO])
async def login(
    data: LoginDTO,
    service: UserApplicationService = Depends(get_user_service),
):
    """邮箱 + 密码登录，返回 bearer 访问令牌"""
    token = await service.login(data)
    return success_response(result=token)


@router.get("", summary="获取当前用户", response_model=ApiResponse[UserResponseDTO])
async def authenticated(auth: AuthContext = Depends(get_auth_context)):
    return success_response(result=auth.user)


@router.post("/logout", summary="登出", response_model=ApiResponse[None])
async def logout(
    auth: AuthContext = Depends(get_auth_context),
    service: UserApplicationService = Depends(get_user_service),
):
    """撤销当前使用的访问令牌"""
    await service.logout(auth.claims)
    return success_response()
