"""
用户领域实体 - 包含核心业务规则
"""
from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass
import re

from domain.common.exceptions import DomainValidationException


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


@dataclass
class User:
    """用户实体 - 领域核心（API 使用者，以邮箱登录）"""

    id: Optional[int]
    email: str
    hashed_password: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """初始化后的业务规则验证"""
        self.email = self.email.strip().lower()
        self.validate_email()

    def validate_email(self) -> None:
        """业务规则：邮箱格式验证"""
        if not re.match(EMAIL_PATTERN, self.email):
            raise DomainValidationException(f"Invalid email: {self.email}", field="email")

    def change_email(self, email: str) -> None:
        """业务规则：修改邮箱"""
        self.email = email.strip().lower()
        self.validate_email()
        self.updated_at = datetime.now(timezone.utc)

    def change_password(self, new_password_hash: str) -> None:
        """业务规则：修改密码"""
        if not new_password_hash:
            raise DomainValidationException("Password must not be empty", field="password")
        self.hashed_password = new_password_hash
        self.updated_at = datetime.now(timezone.utc)
