from enum import Enum

from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def enum_column(enum_cls: type[Enum]) -> SQLEnum:
    """Enum column type that stores the lowercase enum values instead of member names."""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
    )
