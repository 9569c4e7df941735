import datetime as dt

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse

from app.api.deps import get_current_user, get_transaction_store
from app.db.settings import Settings, get_settings
from app.models.user import User
from app.schemas.report import FinancialReportResponse
from app.services.period import resolve_date_range
from app.services.report_renderer import report_response, templates
from app.services.reporting import FinancialReport, build_financial_report
from app.services.store import TransactionStore

router = APIRouter(prefix="/api/reports", tags=["reports"])


async def _load_report(
    start_date: dt.date,
    end_date: dt.date,
    business_name: str | None,
    store: TransactionStore,
    settings: Settings,
) -> FinancialReport:
    try:
        date_range = resolve_date_range(start_date, end_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    transactions = await store.list_transactions(date_range)
    return build_financial_report(
        transactions,
        date_range,
        business_name=business_name or settings.business_name,
    )


@router.get("/financial", response_model=FinancialReportResponse)
async def financial_report(
    start_date: dt.date = Query(description="Inclusive, YYYY-MM-DD"),
    end_date: dt.date = Query(description="Inclusive, YYYY-MM-DD"),
    business_name: str | None = Query(default=None, max_length=120),
    store: TransactionStore = Depends(get_transaction_store),
    settings: Settings = Depends(get_settings),
    _: User = Depends(get_current_user),
) -> FinancialReportResponse:
    report = await _load_report(start_date, end_date, business_name, store, settings)
    return report_response(report, settings.currency_code)


@router.get("/financial.html", response_class=HTMLResponse)
async def financial_report_document(
    request: Request,
    start_date: dt.date = Query(description="Inclusive, YYYY-MM-DD"),
    end_date: dt.date = Query(description="Inclusive, YYYY-MM-DD"),
    business_name: str | None = Query(default=None, max_length=120),
    store: TransactionStore = Depends(get_transaction_store),
    settings: Settings = Depends(get_settings),
    _: User = Depends(get_current_user),
) -> HTMLResponse:
    report = await _load_report(start_date, end_date, business_name, store, settings)
    return templates.TemplateResponse(
        request=request,
        name="report.html",
        context={
            "report": report,
            "currency": settings.currency_code,
            "symbol": settings.currency_symbol,
        },
    )
