import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_current_user, get_transaction_store, require_write_access
from app.models.user import User
from app.schemas.transaction import (
    TransactionCreate,
    TransactionImportRequest,
    TransactionImportResponse,
    TransactionRead,
)
from app.services.period import resolve_date_range
from app.services.reporting import validate_records
from app.services.store import TransactionStore
from app.services.transactions import serialize_transaction

router = APIRouter(prefix="/api", tags=["transactions"])


@router.get("/transactions", response_model=list[TransactionRead])
async def list_transactions(
    start_date: dt.date | None = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    end_date: dt.date | None = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    store: TransactionStore = Depends(get_transaction_store),
    _: User = Depends(get_current_user),
) -> list[TransactionRead]:
    try:
        date_range = resolve_date_range(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    transactions = await store.list_transactions(date_range)
    return [serialize_transaction(item) for item in transactions]


@router.post("/transactions", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionCreate,
    store: TransactionStore = Depends(get_transaction_store),
    user: User = Depends(require_write_access),
) -> TransactionRead:
    try:
        transaction = await store.add_transaction(payload, user.id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return serialize_transaction(transaction)


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    store: TransactionStore = Depends(get_transaction_store),
    _: User = Depends(require_write_access),
) -> dict[str, str]:
    deleted = await store.delete_transaction(transaction_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return {"status": "ok"}


@router.post("/transactions/import", response_model=TransactionImportResponse, status_code=status.HTTP_201_CREATED)
async def import_transactions(
    payload: TransactionImportRequest,
    store: TransactionStore = Depends(get_transaction_store),
    user: User = Depends(require_write_access),
) -> TransactionImportResponse:
    valid, errors = validate_records(payload.records)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Some records are invalid, nothing was imported", "errors": errors},
        )

    inserted = await store.import_transactions(valid, user.id)
    return TransactionImportResponse(inserted=inserted)
