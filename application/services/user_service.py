"""
用户应用服务（application/services）- 编排领域服务和处理应用逻辑
"""
from typing import List, Callable

from domain.user.entity import User
from domain.user.service import UserDomainService
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.common.exceptions import InvalidCredentialsException, UserNotFoundException
from application.dto import (
    RegisterDTO, LoginDTO, UserUpdateDTO, UserResponseDTO, AccessTokenDTO,
)
from application.services.token_service import TokenService, TokenClaims
from core.exceptions import UnauthorizedException
from core.logging_config import get_logger


logger = get_logger(__name__)


class UserApplicationService:
    """用户应用服务 - 处理应用层逻辑"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory
        self._token_service = TokenService(uow_factory)

    async def has_users(self) -> bool:
        """是否已存在用户（注册接口仅在无用户时开放匿名访问）"""
        async with self._uow_factory(readonly=True) as uow:
            return await uow.user_repository.count_all() > 0

    async def register_user(self, data: RegisterDTO) -> UserResponseDTO:
        """注册新用户"""
        async with self._uow_factory() as uow:
            domain_service = UserDomainService(uow.user_repository)
            user = await domain_service.register_user(
                email=data.email,
                password=data.password,
                full_name=data.full_name,
            )
            self._log_events(domain_service)
            return self._to_response_dto(user)

    async def login(self, data: LoginDTO) -> AccessTokenDTO:
        """用户登录，签发访问令牌"""
        async with self._uow_factory() as uow:
            domain_service = UserDomainService(uow.user_repository)
            user = await domain_service.authenticate_user(data.email, data.password)
            if user is None:
                logger.info("login_failed", email=data.email)
                raise InvalidCredentialsException()
            # 在同一事务中记录令牌
            token = await self._token_service.create_access_token(user, uow=uow)
            logger.info("login_succeeded", user_id=user.id)
            return token

    async def logout(self, claims: TokenClaims) -> None:
        """登出：撤销当前令牌"""
        await self._token_service.revoke_token(claims.jti)
        logger.info("logout", user_id=claims.user_id, jti=claims.jti)

    async def authenticate(self, token: str) -> tuple[UserResponseDTO, TokenClaims]:
        """校验令牌并返回当前用户；令牌无效或用户已删除时抛出 401"""
        claims = await self._token_service.verify_access_token(token)
        if claims is None:
            raise UnauthorizedException()
        async with self._uow_factory(readonly=True) as uow:
            user = await uow.user_repository.get_by_id(claims.user_id)
        if not user:
            raise UnauthorizedException()
        return self._to_response_dto(user), claims

    async def get_user(self, user_id: int) -> UserResponseDTO:
        """获取用户信息"""
        async with self._uow_factory(readonly=True) as uow:
            user = await uow.user_repository.get_by_id(user_id)
            if not user:
                raise UserNotFoundException(str(user_id))
            return self._to_response_dto(user)

    async def list_users(self, skip: int = 0, limit: int = 100) -> List[UserResponseDTO]:
        """获取用户列表"""
        async with self._uow_factory(readonly=True) as uow:
            users = await uow.user_repository.get_all(skip, limit)
            return [self._to_response_dto(user) for user in users]

    async def update_user(self, user_id: int, data: UserUpdateDTO) -> UserResponseDTO:
        """更新用户邮箱/密码"""
        async with self._uow_factory() as uow:
            domain_service = UserDomainService(uow.user_repository)
            user = await domain_service.update_credentials(
                user_id,
                email=data.email,
                password=data.password,
            )
            self._log_events(domain_service)
            return self._to_response_dto(user)

    async def delete_user(self, user_id: int) -> UserResponseDTO:
        """删除用户（同时撤销其全部令牌），返回被删除的用户"""
        async with self._uow_factory() as uow:
            domain_service = UserDomainService(uow.user_repository)
            await uow.access_token_repository.delete_by_user(user_id)
            user = await domain_service.delete_user(user_id)
            self._log_events(domain_service)
            return self._to_response_dto(user)

    def _log_events(self, domain_service: UserDomainService) -> None:
        for event in domain_service.get_domain_events():
            # structlog 的首个参数即 event，事件类型使用单独字段
            logger.info(
                "user_domain_event",
                event_type=type(event).__name__,
                event_id=event.event_id,
                user_id=event.user_id,
            )

    def _to_response_dto(self, user: User) -> UserResponseDTO:
        """将领域实体转换为响应DTO"""
        return UserResponseDTO(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
