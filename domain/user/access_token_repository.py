"""
访问令牌仓储接口 - 记录已签发令牌，支持登出撤销
"""
from abc import ABC, abstractmethod
from typing import Optional
from datetime import datetime


class AccessTokenRepository(ABC):
    """访问令牌仓储抽象接口"""

    @abstractmethod
    async def create(
        self,
        jti: str,
        user_id: int,
        name: str,
        token_hash: str,
        expires_at: datetime,
    ) -> int:
        """
        创建访问令牌记录

        Args:
            jti: JWT Token ID
            user_id: 用户ID
            name: 令牌名称
            token_hash: 令牌哈希（不保存明文）
            expires_at: 过期时间

        Returns:
            创建的令牌ID
        """
        pass

    @abstractmethod
    async def get_by_jti(self, jti: str) -> Optional[dict]:
        """根据JTI获取令牌记录"""
        pass

    @abstractmethod
    async def touch(self, jti: str) -> None:
        """记录最近使用时间"""
        pass

    @abstractmethod
    async def delete(self, jti: str) -> bool:
        """删除（撤销）指定令牌"""
        pass

    @abstractmethod
    async def delete_by_user(self, user_id: int) -> int:
        """删除用户所有令牌，返回删除数量"""
        pass
