"""Infrastructure models package exports."""
from .base import Base, metadata
from .user import UserModel
from .access_token import AccessTokenModel

__all__ = [
    "Base",
    "metadata",
    "UserModel",
    "AccessTokenModel",
]
