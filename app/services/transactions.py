from app.schemas.report import HighlightRead
from app.schemas.transaction import TransactionRead
from app.services.reporting import Highlight, LedgerTransaction


def serialize_transaction(transaction: LedgerTransaction) -> TransactionRead:
    owner = transaction.owner
    return TransactionRead(
        id=transaction.id,
        date=transaction.date,
        type=transaction.type,
        amount=transaction.amount,
        category=transaction.category,
        description=transaction.description,
        created_at=transaction.created_at,
        user_email=owner.email if owner else None,
        user_name=owner.name if owner else None,
    )


def serialize_highlight(highlight: Highlight) -> HighlightRead:
    base = serialize_transaction(highlight.transaction)
    return HighlightRead(**base.model_dump(), user_prefix=highlight.user_prefix)
