from app.models.enums import Permission, TransactionType, UserRole
from app.models.transaction import Transaction
from app.models.user import User, UserSession

__all__ = [
    "Permission",
    "Transaction",
    "TransactionType",
    "User",
    "UserRole",
    "UserSession",
]
