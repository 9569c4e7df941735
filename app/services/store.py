"""Transaction storage used by the HTTP layer.

Routers receive a ``TransactionStore`` through a FastAPI dependency, so the
backing database session is created per request and never shared globally.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.transaction import Transaction
from app.schemas.transaction import TransactionCreate
from app.services.reporting import DateRange, LedgerTransaction, TransactionOwner

logger = logging.getLogger(__name__)


def to_ledger(transaction: Transaction) -> LedgerTransaction:
    owner = None
    if transaction.user is not None:
        owner = TransactionOwner(email=transaction.user.email, name=transaction.user.name)
    return LedgerTransaction(
        id=transaction.id,
        date=transaction.date,
        type=transaction.type,
        amount=transaction.amount,
        description=transaction.description,
        category=transaction.category,
        created_at=transaction.created_at,
        owner=owner,
    )


class TransactionStore(ABC):
    @abstractmethod
    async def list_transactions(self, date_range: DateRange | None = None) -> list[LedgerTransaction]:
        """Return transactions inside ``date_range``, newest date first."""

    @abstractmethod
    async def recent_transactions(self, limit: int) -> list[LedgerTransaction]:
        """Return up to ``limit`` transactions ordered by creation time, newest first."""

    @abstractmethod
    async def add_transaction(self, payload: TransactionCreate, user_id: int) -> LedgerTransaction:
        ...

    @abstractmethod
    async def import_transactions(self, items: list[LedgerTransaction], user_id: int) -> int:
        """Persist already validated records and return how many were stored."""

    @abstractmethod
    async def delete_transaction(self, transaction_id: int) -> bool:
        """Return ``False`` when no transaction has the given id."""


class SqlTransactionStore(TransactionStore):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_transactions(self, date_range: DateRange | None = None) -> list[LedgerTransaction]:
        filters = []
        if date_range is not None and date_range.start is not None:
            filters.append(Transaction.date >= date_range.start)
        if date_range is not None and date_range.end is not None:
            filters.append(Transaction.date <= date_range.end)

        result = await self.session.scalars(
            select(Transaction)
            .options(selectinload(Transaction.user))
            .where(*filters)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        return [to_ledger(item) for item in result.all()]

    async def recent_transactions(self, limit: int) -> list[LedgerTransaction]:
        result = await self.session.scalars(
            select(Transaction)
            .options(selectinload(Transaction.user))
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return [to_ledger(item) for item in result.all()]

    async def add_transaction(self, payload: TransactionCreate, user_id: int) -> LedgerTransaction:
        transaction = Transaction(
            date=payload.date,
            type=payload.type,
            amount=payload.amount,
            category=payload.category.strip() if payload.category else None,
            description=payload.description,
            user_id=user_id,
        )
        self.session.add(transaction)
        await self.session.commit()

        saved = await self.session.scalar(
            select(Transaction).options(selectinload(Transaction.user)).where(Transaction.id == transaction.id)
        )
        if saved is None:
            raise LookupError("Transaction not found after insert")

        logger.info("Stored %s transaction %s for user %s", saved.type.value, saved.id, user_id)
        return to_ledger(saved)

    async def import_transactions(self, items: list[LedgerTransaction], user_id: int) -> int:
        for item in items:
            self.session.add(
                Transaction(
                    date=item.date,
                    type=item.type,
                    amount=item.amount,
                    category=item.category,
                    description=item.description or item.type.value.capitalize(),
                    user_id=user_id,
                )
            )
        await self.session.commit()
        logger.info("Imported %d transactions for user %s", len(items), user_id)
        return len(items)

    async def delete_transaction(self, transaction_id: int) -> bool:
        transaction = await self.session.get(Transaction, transaction_id)
        if transaction is None:
            return False

        await self.session.delete(transaction)
        await self.session.commit()
        return True
