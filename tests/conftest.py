import datetime as dt
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_current_user, get_transaction_store
from app.main import app
from app.models.enums import Permission, TransactionType, UserRole
from app.schemas.transaction import TransactionCreate
from app.services.reporting import DateRange, LedgerTransaction, TransactionOwner, filter_by_range
from app.services.store import TransactionStore


class InMemoryTransactionStore(TransactionStore):
    def __init__(self, items: list[LedgerTransaction] | None = None) -> None:
        self.items = list(items or [])

    async def list_transactions(self, date_range: DateRange | None = None) -> list[LedgerTransaction]:
        return sorted(filter_by_range(self.items, date_range), key=lambda item: item.date, reverse=True)

    async def recent_transactions(self, limit: int) -> list[LedgerTransaction]:
        return sorted(self.items, key=lambda item: item.created_at, reverse=True)[:limit]

    async def add_transaction(self, payload: TransactionCreate, user_id: int) -> LedgerTransaction:
        item = LedgerTransaction(
            id=len(self.items) + 1,
            date=payload.date,
            type=payload.type,
            amount=payload.amount,
            description=payload.description,
            category=payload.category,
            created_at=dt.datetime(2024, 6, 1, tzinfo=dt.timezone.utc),
            owner=TransactionOwner(email="owner@biz.gh", name="Owner"),
        )
        self.items.append(item)
        return item

    async def import_transactions(self, items: list[LedgerTransaction], user_id: int) -> int:
        self.items.extend(items)
        return len(items)

    async def delete_transaction(self, transaction_id: int) -> bool:
        for item in self.items:
            if item.id == transaction_id:
                self.items.remove(item)
                return True
        return False


def _created(minutes: int) -> dt.datetime:
    return dt.datetime(2024, 3, 1, 9, tzinfo=dt.timezone.utc) + dt.timedelta(minutes=minutes)


@pytest.fixture
def scenario_transactions() -> list[LedgerTransaction]:
    kofi = TransactionOwner(email="kofi@biz.gh", name="Kofi")
    ama = TransactionOwner(email="", name="Ama")
    return [
        LedgerTransaction(1, dt.date(2024, 1, 5), TransactionType.INCOME, Decimal("100"), "Sales", None, _created(1), kofi),
        LedgerTransaction(2, dt.date(2024, 1, 10), TransactionType.EXPENDITURE, Decimal("40"), "Shop rent", "Rent", _created(2), ama),
        LedgerTransaction(3, dt.date(2024, 2, 1), TransactionType.EXPENDITURE, Decimal("10"), "Rent top-up", "Rent", _created(3), kofi),
        LedgerTransaction(4, dt.date(2024, 2, 15), TransactionType.INCOME, Decimal("20"), "Repairs", None, _created(4), ama),
    ]


@pytest.fixture
def store(scenario_transactions) -> InMemoryTransactionStore:
    return InMemoryTransactionStore(scenario_transactions)


@pytest.fixture
def writer() -> SimpleNamespace:
    return SimpleNamespace(id=1, email="admin@biz.gh", name="Admin", role=UserRole.ADMIN, permission=Permission.WRITE)


@pytest.fixture
def reader() -> SimpleNamespace:
    return SimpleNamespace(id=2, email="clerk@biz.gh", name="Clerk", role=UserRole.USER, permission=Permission.READ)


@pytest.fixture
def client(store, writer):
    app.dependency_overrides[get_transaction_store] = lambda: store
    app.dependency_overrides[get_current_user] = lambda: writer
    yield TestClient(app)
    app.dependency_overrides.clear()
