import datetime as dt
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_current_user, get_transaction_store
from app.db.settings import Settings, get_settings
from app.models.user import User
from app.schemas.report import DashboardSummaryResponse
from app.services.period import resolve_date_range
from app.services.report_renderer import summary_read
from app.services.reporting import compute_summary, select_recent_highlights
from app.services.store import TransactionStore
from app.services.transactions import serialize_highlight

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=DashboardSummaryResponse)
async def dashboard_summary(
    start_date: dt.date | None = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    end_date: dt.date | None = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    store: TransactionStore = Depends(get_transaction_store),
    settings: Settings = Depends(get_settings),
    _: User = Depends(get_current_user),
) -> DashboardSummaryResponse:
    try:
        date_range = resolve_date_range(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    transactions = await store.list_transactions(date_range)
    summary = compute_summary(transactions, date_range)

    limit = settings.recent_transactions_limit
    highlights = select_recent_highlights(await store.recent_transactions(limit), limit)

    logger.debug("Dashboard summary: %d transactions in range", summary.transaction_count)
    return DashboardSummaryResponse(
        summary=summary_read(summary),
        recent_transactions=[serialize_highlight(item) for item in highlights],
    )
