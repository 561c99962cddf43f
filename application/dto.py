"""
数据传输对象（DTO）- 应用层与表现层之间的数据传输
"""
from pydantic import BaseModel, EmailStr, Field, model_serializer, ConfigDict
from typing import Optional
from datetime import datetime, timezone

from domain.user.service import MIN_PASSWORD_LENGTH


class DTOBase(BaseModel):
    """Base DTO: unify datetime serialization to UTC-Z for all subclasses."""

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)

        def convert(value):
            if isinstance(value, datetime):
                ts = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                s = ts.astimezone(timezone.utc).isoformat()
                return s.replace("+00:00", "Z")
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(data)


class RegisterDTO(DTOBase):
    """用户注册DTO"""
    email: EmailStr = Field(..., description="邮箱地址（登录名）")
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, description="密码")
    full_name: Optional[str] = Field(None, max_length=100, description="全名")


class LoginDTO(DTOBase):
    """登录DTO"""
    email: EmailStr = Field(..., description="邮箱")
    password: str = Field(..., min_length=1, description="密码")


class UserUpdateDTO(DTOBase):
    """用户更新DTO（邮箱/密码）"""
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)


class UserResponseDTO(DTOBase):
    """用户响应DTO（不含密码）"""
    id: int
    email: str
    full_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccessTokenDTO(DTOBase):
    """访问令牌DTO"""
    type: str = "bearer"
    token: str
    name: str
    expires_at: datetime
