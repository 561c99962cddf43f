"""
用户领域服务 - 处理注册、认证与凭据修改的业务逻辑
"""
from typing import Optional, List
from datetime import datetime, timezone
import hashlib
import hmac
import secrets

from domain.common.exceptions import (
    DomainValidationException,
    EmailAlreadyExistsException,
    UserAlreadyExistsException,
    UserNotFoundException,
)
from .entity import User
from .repository import UserRepository
from .events import UserRegistered, UserCredentialsChanged, UserDeleted


MIN_PASSWORD_LENGTH = 6


class PasswordService:
    """密码服务 - 处理密码相关的业务逻辑"""

    ITERATIONS = 100000

    @classmethod
    def hash_password(cls, password: str) -> str:
        """密码哈希（pbkdf2-sha256，随机盐）"""
        salt = secrets.token_hex(32)
        pwd_hash = hashlib.pbkdf2_hmac('sha256',
                                       password.encode('utf-8'),
                                       salt.encode('utf-8'),
                                       cls.ITERATIONS)
        return f"{salt}${pwd_hash.hex()}"

    @classmethod
    def verify_password(cls, plain_password: str, hashed_password: str) -> bool:
        """验证密码"""
        salt, sep, pwd_hash = hashed_password.partition('$')
        if not sep:
            return False
        new_hash = hashlib.pbkdf2_hmac('sha256',
                                       plain_password.encode('utf-8'),
                                       salt.encode('utf-8'),
                                       cls.ITERATIONS)
        return hmac.compare_digest(new_hash.hex(), pwd_hash)

    @staticmethod
    def validate_password_strength(password: str) -> None:
        """业务规则：密码长度"""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise DomainValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )


class UserDomainService:
    """用户领域服务 - 编排复杂的业务流程"""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository
        self.password_service = PasswordService()
        self.events: List = []  # 领域事件收集

    async def register_user(self,
                            email: str,
                            password: str,
                            full_name: Optional[str] = None) -> User:
        """用户注册的业务流程"""
        # 业务规则1：验证密码强度
        self.password_service.validate_password_strength(password)

        # 业务规则2：邮箱唯一（不区分大小写）
        email = email.strip().lower()
        if await self.user_repository.exists_by_email(email):
            raise UserAlreadyExistsException(email)

        now = datetime.now(timezone.utc)
        user = User(
            id=None,
            email=email,
            hashed_password=self.password_service.hash_password(password),
            full_name=full_name,
            created_at=now,
            updated_at=now,
        )
        created_user = await self.user_repository.create(user)

        self.events.append(UserRegistered(user_id=created_user.id, email=created_user.email))
        return created_user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """用户认证：邮箱不存在或密码错误均返回 None"""
        user = await self.user_repository.get_by_email(email.strip().lower())
        if not user:
            return None
        if not self.password_service.verify_password(password, user.hashed_password):
            return None
        return user

    async def update_credentials(self,
                                 user_id: int,
                                 email: Optional[str] = None,
                                 password: Optional[str] = None) -> User:
        """修改邮箱/密码；邮箱被其他用户占用时拒绝"""
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise UserNotFoundException(str(user_id))

        changed = []
        if email is not None and email.strip().lower() != user.email:
            if await self.user_repository.exists_by_email(email.strip().lower(), exclude_id=user_id):
                raise EmailAlreadyExistsException(email)
            user.change_email(email)
            changed.append("email")

        if password is not None:
            self.password_service.validate_password_strength(password)
            user.change_password(self.password_service.hash_password(password))
            changed.append("password")

        if not changed:
            return user

        updated_user = await self.user_repository.update(user)
        self.events.append(UserCredentialsChanged(user_id=user_id, updated_fields=changed))
        return updated_user

    async def delete_user(self, user_id: int) -> User:
        """删除用户并返回被删除的实体"""
        user = await self.user_repository.get_by_id(user_id)
        if not user:
            raise UserNotFoundException(str(user_id))
        await self.user_repository.delete(user_id)
        self.events.append(UserDeleted(user_id=user_id))
        return user

    def get_domain_events(self) -> List:
        """获取并清空领域事件"""
        events = self.events.copy()
        self.events.clear()
        return events
