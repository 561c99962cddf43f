"""
令牌服务 - 签发、校验与撤销访问令牌

访问令牌为 HS256 JWT，其 JTI 及令牌哈希持久化在 access_tokens 表中：
- 校验时除签名与过期时间外，还要求记录存在（未被撤销）且哈希一致
- 登出即删除记录，令牌立即失效
"""
from typing import Optional, Callable
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass
import jwt
import uuid
import hashlib

from domain.user.entity import User
from domain.common.unit_of_work import AbstractUnitOfWork
from application.dto import AccessTokenDTO
from core.config import settings
from core.exceptions import TokenExpiredException
from core.logging_config import get_logger


logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class TokenClaims:
    """已校验令牌的声明"""
    user_id: int
    jti: str


class TokenService:
    """令牌服务"""

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    def _hash_token(self, token: str) -> str:
        """计算令牌的SHA-256哈希"""
        return hashlib.sha256(token.encode()).hexdigest()

    def _generate_jti(self) -> str:
        """生成唯一的JWT Token ID"""
        return uuid.uuid4().hex

    async def create_access_token(
        self,
        user: User,
        *,
        uow: Optional[AbstractUnitOfWork] = None,
    ) -> AccessTokenDTO:
        """创建访问令牌并记录到数据库（可复用调用方的事务）"""
        jti = self._generate_jti()
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "exp": expires_at,
            "type": ACCESS_TOKEN_TYPE,
            "jti": jti,
        }
        token = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

        record = dict(
            jti=jti,
            user_id=user.id,
            name=settings.ACCESS_TOKEN_NAME,
            token_hash=self._hash_token(token),
            expires_at=expires_at,
        )
        if uow is None:
            async with self._uow_factory() as uow_local:
                await uow_local.access_token_repository.create(**record)
        else:
            await uow.access_token_repository.create(**record)

        logger.info("access_token_created", user_id=user.id, jti=jti)

        return AccessTokenDTO(
            type="bearer",
            token=token,
            name=settings.ACCESS_TOKEN_NAME,
            expires_at=expires_at,
        )

    async def verify_access_token(self, token: str) -> Optional[TokenClaims]:
        """校验访问令牌。

        - 过期: 抛出 TokenExpiredException
        - 无效、类型错误、已撤销: 返回 None
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.InvalidTokenError as e:
            logger.info("invalid_access_token", error=str(e))
            return None

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return None

        jti = payload.get("jti")
        user_id = payload.get("sub")
        if not jti or user_id is None:
            return None

        async with self._uow_factory() as uow:
            record = await uow.access_token_repository.get_by_jti(jti)
            if not record:
                logger.info("access_token_revoked_or_unknown", jti=jti)
                return None
            if record["token_hash"] != self._hash_token(token):
                logger.warning("access_token_hash_mismatch", jti=jti)
                return None
            await uow.access_token_repository.touch(jti)

        return TokenClaims(user_id=int(user_id), jti=jti)

    async def revoke_token(self, jti: str) -> bool:
        """撤销单个访问令牌（登出）"""
        async with self._uow_factory() as uow:
            return await uow.access_token_repository.delete(jti)
