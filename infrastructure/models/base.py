"""
ORM 声明基类（SQLAlchemy 2.0）
"""
from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


# 约束统一命名，外部迁移工具生成的脚本保持稳定
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


metadata = Base.metadata
