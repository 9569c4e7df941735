import datetime as dt
from decimal import Decimal

from pydantic import BaseModel

from app.schemas.transaction import TransactionRead


class SummaryRead(BaseModel):
    total_income: Decimal
    total_expenditure: Decimal
    net_balance: Decimal
    transaction_count: int


class HighlightRead(TransactionRead):
    user_prefix: str


class DashboardSummaryResponse(BaseModel):
    summary: SummaryRead
    recent_transactions: list[HighlightRead]


class MonthlyBreakdownItem(BaseModel):
    month: str
    income: Decimal
    expenditure: Decimal
    net: Decimal


class CategoryBreakdownItem(BaseModel):
    category: str
    amount: Decimal
    percentage: Decimal


class ReportLine(BaseModel):
    date: dt.date
    description: str
    category: str | None
    amount: Decimal


class FinancialReportResponse(BaseModel):
    business_name: str
    start_date: dt.date | None
    end_date: dt.date | None
    prepared_on: dt.date
    year: int
    currency: str
    summary: SummaryRead
    income: list[ReportLine]
    expenditure: list[ReportLine]
    monthly_breakdown: list[MonthlyBreakdownItem]
    category_breakdown: list[CategoryBreakdownItem]
