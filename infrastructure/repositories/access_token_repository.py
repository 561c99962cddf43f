"""
访问令牌仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete

from domain.user.access_token_repository import AccessTokenRepository
from infrastructure.models.access_token import AccessTokenModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyAccessTokenRepository(AccessTokenRepository):
    """访问令牌仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        jti: str,
        user_id: int,
        name: str,
        token_hash: str,
        expires_at: datetime,
    ) -> int:
        """创建访问令牌记录"""
        db_token = AccessTokenModel(
            jti=jti,
            user_id=user_id,
            name=name,
            token_hash=token_hash,
            expires_at=expires_at,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(db_token)
        await self.session.flush()
        await self.session.refresh(db_token)
        return db_token.id

    async def get_by_jti(self, jti: str) -> Optional[dict]:
        """根据JTI获取令牌记录"""
        result = await self.session.execute(
            select(AccessTokenModel).where(AccessTokenModel.jti == jti)
        )
        db_token = result.scalar_one_or_none()
        if not db_token:
            return None
        return {
            "id": db_token.id,
            "jti": db_token.jti,
            "user_id": db_token.user_id,
            "name": db_token.name,
            "token_hash": db_token.token_hash,
            "created_at": db_token.created_at,
            "expires_at": db_token.expires_at,
            "last_used_at": db_token.last_used_at,
        }

    async def touch(self, jti: str) -> None:
        """记录最近使用时间"""
        await self.session.execute(
            update(AccessTokenModel)
            .where(AccessTokenModel.jti == jti)
            .values(last_used_at=datetime.now(timezone.utc))
        )

    async def delete(self, jti: str) -> bool:
        """删除（撤销）指定令牌"""
        result = await self.session.execute(
            delete(AccessTokenModel).where(AccessTokenModel.jti == jti)
        )
        revoked = (result.rowcount or 0) > 0
        if revoked:
            logger.info("access_token_revoked", jti=jti)
        return revoked

    async def delete_by_user(self, user_id: int) -> int:
        """删除用户所有令牌"""
        result = await self.session.execute(
            delete(AccessTokenModel).where(AccessTokenModel.user_id == user_id)
        )
        return int(result.rowcount or 0)
