"""Unit of Work 抽象：用户与访问令牌的变更在同一事务边界内完成"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.user.repository import UserRepository
from domain.user.access_token_repository import AccessTokenRepository


class AbstractUnitOfWork(ABC):
    """``async with`` 正常退出时提交，异常时回滚；只读模式从不提交"""

    user_repository: UserRepository
    access_token_repository: AccessTokenRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self.readonly = readonly
        self.committed = False

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            await self.rollback()
        elif not self.readonly and not self.committed:
            await self.commit()

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...
