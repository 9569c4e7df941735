from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from fastapi.templating import Jinja2Templates

from app.schemas.report import (
    CategoryBreakdownItem,
    FinancialReportResponse,
    MonthlyBreakdownItem,
    ReportLine,
    SummaryRead,
)
from app.services.period import format_period
from app.services.reporting import FinancialReport, LedgerTransaction, Summary

CENT = Decimal("0.01")
TENTH = Decimal("0.1")

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def format_money(amount: Decimal, symbol: str = "") -> str:
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def format_percentage(value: Decimal) -> str:
    return f"{value.quantize(TENTH, rounding=ROUND_HALF_UP)}%"


templates.env.filters["money"] = format_money
templates.env.filters["percentage"] = format_percentage
templates.env.globals["format_period"] = format_period


def summary_read(summary: Summary) -> SummaryRead:
    return SummaryRead(
        total_income=summary.total_income,
        total_expenditure=summary.total_expenditure,
        net_balance=summary.net_balance,
        transaction_count=summary.transaction_count,
    )


def _line(item: LedgerTransaction) -> ReportLine:
    return ReportLine(date=item.date, description=item.description, category=item.category, amount=item.amount)


def report_response(report: FinancialReport, currency: str) -> FinancialReportResponse:
    return FinancialReportResponse(
        business_name=report.business_name,
        start_date=report.period.start,
        end_date=report.period.end,
        prepared_on=report.prepared_on,
        year=report.year,
        currency=currency,
        summary=summary_read(report.summary),
        income=[_line(item) for item in report.income_lines],
        expenditure=[_line(item) for item in report.expenditure_lines],
        monthly_breakdown=[
            MonthlyBreakdownItem(month=row.month, income=row.income, expenditure=row.expenditure, net=row.net)
            for row in report.monthly
        ],
        category_breakdown=[
            CategoryBreakdownItem(category=row.category, amount=row.amount, percentage=row.percentage)
            for row in report.categories
        ],
    )
