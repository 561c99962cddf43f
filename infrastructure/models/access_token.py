"""
访问令牌数据库模型 - SQLAlchemy ORM模型
记录已签发的访问令牌，登出时删除对应记录即撤销
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from datetime import datetime, timezone

from .base import Base


class AccessTokenModel(Base):
    """访问令牌数据库模型（只保存哈希，不保存明文）"""
    __tablename__ = "access_tokens"

    id = Column(Integer, primary_key=True, index=True)

    jti = Column(String(64), unique=True, index=True, nullable=False, comment="令牌唯一标识符")
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True, comment="用户ID")
    name = Column(String(100), nullable=False, comment="令牌名称")
    token_hash = Column(String(128), nullable=False, comment="令牌SHA-256哈希")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True, comment="过期时间")
    last_used_at = Column(DateTime(timezone=True), nullable=True, comment="最近使用时间")

    def __repr__(self):
        return f"<AccessTokenModel(id={self.id}, jti='{self.jti}', user_id={self.user_id})>"
