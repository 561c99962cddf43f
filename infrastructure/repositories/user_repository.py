"""
用户仓储实现（SQLAlchemy 2.0 异步）

仓储只负责 flush，事务的提交与回滚由 Unit of Work 统一处理。
"""
from typing import Optional, List, Type

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.exceptions import (
    BusinessException,
    EmailAlreadyExistsException,
    UserAlreadyExistsException,
    UserNotFoundException,
)
from domain.user.entity import User
from domain.user.repository import UserRepository
from infrastructure.models.user import UserModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(row: UserModel) -> User:
        return User(
            id=row.id,
            email=row.email,
            hashed_password=row.hashed_password,
            full_name=row.full_name,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def _first(self, *criteria) -> Optional[UserModel]:
        result = await self.session.execute(select(UserModel).where(*criteria))
        return result.scalar_one_or_none()

    async def _flush_unique_email(self, email: str, conflict: Type[BusinessException]) -> None:
        """并发写入同一邮箱时由唯一约束兜底，转换为业务异常"""
        try:
            await self.session.flush()
        except IntegrityError as exc:
            logger.warning("user_email_conflict", email=email)
            raise conflict(email) from exc

    async def create(self, user: User) -> User:
        row = UserModel(
            email=user.email,
            hashed_password=user.hashed_password,
            full_name=user.full_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self.session.add(row)
        await self._flush_unique_email(user.email, UserAlreadyExistsException)
        await self.session.refresh(row)
        return self._to_entity(row)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        row = await self._first(UserModel.id == user_id)
        return self._to_entity(row) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        row = await self._first(UserModel.email == email)
        return self._to_entity(row) if row else None

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[User]:
        """按 ID 升序分页"""
        result = await self.session.execute(
            select(UserModel).order_by(UserModel.id.asc()).offset(skip).limit(limit)
        )
        return [self._to_entity(row) for row in result.scalars()]

    async def update(self, user: User) -> User:
        row = await self._first(UserModel.id == user.id)
        if row is None:
            raise UserNotFoundException(str(user.id))

        row.email = user.email
        row.full_name = user.full_name
        row.hashed_password = user.hashed_password
        row.updated_at = user.updated_at
        await self._flush_unique_email(user.email, EmailAlreadyExistsException)
        return self._to_entity(row)

    async def delete(self, user_id: int) -> bool:
        row = await self._first(UserModel.id == user_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True

    async def exists_by_email(self, email: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(func.count()).select_from(UserModel).where(UserModel.email == email)
        if exclude_id is not None:
            stmt = stmt.where(UserModel.id != exclude_id)
        return (await self.session.scalar(stmt) or 0) > 0

    async def count_all(self) -> int:
        return int(await self.session.scalar(select(func.count()).select_from(UserModel)) or 0)
