from enum import Enum

from sqlalchemy import Enum as SAEnum


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENDITURE = "expenditure"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Permission(str, Enum):
    READ = "read"
    WRITE = "write"


def _string_enum(enum_cls: type[Enum], length: int) -> SAEnum:
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda items: [item.value for item in items],
    )


transaction_type_enum = _string_enum(TransactionType, 16)
user_role_enum = _string_enum(UserRole, 16)
permission_enum = _string_enum(Permission, 16)
