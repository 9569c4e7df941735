from app.schemas.auth import LoginRequest, LoginResponse, SessionResponse, UserRead
from app.schemas.report import (
    CategoryBreakdownItem,
    DashboardSummaryResponse,
    FinancialReportResponse,
    HighlightRead,
    MonthlyBreakdownItem,
    ReportLine,
    SummaryRead,
)
from app.schemas.transaction import (
    TransactionCreate,
    TransactionImportRequest,
    TransactionImportResponse,
    TransactionRead,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "SessionResponse",
    "UserRead",
    "TransactionCreate",
    "TransactionRead",
    "TransactionImportRequest",
    "TransactionImportResponse",
    "SummaryRead",
    "HighlightRead",
    "DashboardSummaryResponse",
    "MonthlyBreakdownItem",
    "CategoryBreakdownItem",
    "ReportLine",
    "FinancialReportResponse",
]
