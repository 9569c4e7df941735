import datetime as dt
from decimal import Decimal

import pytest

from app.models.enums import TransactionType
from app.services.period import format_period, resolve_date_range
from app.services.report_renderer import format_money, format_percentage, report_response
from app.services.reporting import DateRange, LedgerTransaction, build_financial_report


def test_format_money_rounds_only_for_display() -> None:
    assert format_money(Decimal("1234.5"), "₵") == "₵1,234.50"
    assert format_money(Decimal("0.005"), "₵") == "₵0.01"
    assert format_money(Decimal("-70"), "₵") == "-₵70.00"
    assert format_money(Decimal("3")) == "3.00"


def test_format_percentage_uses_one_decimal() -> None:
    assert format_percentage(Decimal("100")) == "100.0%"
    assert format_percentage(Decimal("100") / Decimal("3")) == "33.3%"
    assert format_percentage(Decimal("0")) == "0.0%"


def test_format_period_handles_open_bounds() -> None:
    assert format_period(DateRange(start=dt.date(2024, 1, 1), end=dt.date(2024, 2, 28))) == "2024-01-01 – 2024-02-28"
    assert format_period(DateRange()) == "beginning – today"


def test_resolve_date_range_rejects_reversed_bounds() -> None:
    with pytest.raises(ValueError, match="start_date must not be after end_date"):
        resolve_date_range(dt.date(2024, 2, 1), dt.date(2024, 1, 1))


def test_report_response_carries_every_section() -> None:
    transactions = [
        LedgerTransaction(1, dt.date(2024, 1, 5), TransactionType.INCOME, Decimal("100"), "Sales"),
        LedgerTransaction(2, dt.date(2024, 1, 10), TransactionType.EXPENDITURE, Decimal("40"), "Shop rent", "Rent"),
    ]
    report = build_financial_report(
        transactions,
        DateRange(start=dt.date(2024, 1, 1), end=dt.date(2024, 1, 31)),
        business_name="Adom Traders",
        today=dt.date(2024, 2, 1),
    )

    response = report_response(report, "GHS")

    assert response.business_name == "Adom Traders"
    assert response.currency == "GHS"
    assert response.summary.net_balance == Decimal("60")
    assert [line.description for line in response.income] == ["Sales"]
    assert [line.category for line in response.expenditure] == ["Rent"]
    assert len(response.monthly_breakdown) == 12
    assert response.monthly_breakdown[0].net == Decimal("60")
    assert response.category_breakdown[0].percentage == Decimal("100")
