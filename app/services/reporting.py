from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from app.models.enums import TransactionType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

USER_PREFIX_LENGTH = 2

# limits of the transactions table columns
AMOUNT_MAX_DIGITS = 12
AMOUNT_DECIMAL_PLACES = 2
CENT = Decimal("0.01")
CATEGORY_MAX_LENGTH = 64
DESCRIPTION_MAX_LENGTH = 255


class ReportValidationError(ValueError):
    def __init__(self, record_id: Any, message: str) -> None:
        super().__init__(f"Transaction {record_id!r}: {message}")
        self.record_id = record_id
        self.message = message


@dataclass(slots=True, frozen=True)
class TransactionOwner:
    email: str | None = None
    name: str | None = None


@dataclass(slots=True, frozen=True)
class LedgerTransaction:
    id: Any
    date: dt.date
    type: TransactionType
    amount: Decimal
    description: str = ""
    category: str | None = None
    created_at: dt.datetime | None = None
    owner: TransactionOwner | None = None


@dataclass(slots=True, frozen=True)
class DateRange:
    start: dt.date | None = None
    end: dt.date | None = None

    def contains(self, day: dt.date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(slots=True, frozen=True)
class Summary:
    total_income: Decimal
    total_expenditure: Decimal
    net_balance: Decimal
    transaction_count: int


@dataclass(slots=True, frozen=True)
class MonthlyBreakdown:
    month: str
    income: Decimal
    expenditure: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expenditure


@dataclass(slots=True, frozen=True)
class CategoryBreakdown:
    category: str
    amount: Decimal
    percentage: Decimal


@dataclass(slots=True, frozen=True)
class Highlight:
    transaction: LedgerTransaction
    user_prefix: str


@dataclass(slots=True)
class FinancialReport:
    business_name: str
    period: DateRange
    prepared_on: dt.date
    year: int
    summary: Summary
    income_lines: list[LedgerTransaction] = field(default_factory=list)
    expenditure_lines: list[LedgerTransaction] = field(default_factory=list)
    monthly: list[MonthlyBreakdown] = field(default_factory=list)
    categories: list[CategoryBreakdown] = field(default_factory=list)


def _parse_date(record_id: Any, value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return _parse_iso_datetime(text).date()
        except ValueError as exc:
            raise ReportValidationError(record_id, f"unparseable date {value!r}") from exc
    raise ReportValidationError(record_id, f"unparseable date {value!r}")


def _parse_iso_datetime(text: str) -> dt.datetime:
    # fromisoformat only understands a trailing "Z" from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return dt.datetime.fromisoformat(text)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def _parse_created_at(record_id: Any, value: Any) -> dt.datetime | None:
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return _as_utc(value)
    if isinstance(value, str):
        try:
            return _as_utc(_parse_iso_datetime(value.strip()))
        except ValueError as exc:
            raise ReportValidationError(record_id, f"unparseable created_at {value!r}") from exc
    raise ReportValidationError(record_id, f"unparseable created_at {value!r}")


def _parse_text(record_id: Any, field_name: str, value: Any, max_length: int) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if len(text) > max_length:
        raise ReportValidationError(record_id, f"{field_name} longer than {max_length} characters")
    return text


def _parse_amount(record_id: Any, value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ReportValidationError(record_id, f"invalid amount {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ReportValidationError(record_id, f"invalid amount {value!r}") from exc
    if not amount.is_finite():
        raise ReportValidationError(record_id, f"invalid amount {value!r}")
    if amount < 0:
        raise ReportValidationError(record_id, "amount must not be negative")
    if amount.adjusted() >= AMOUNT_MAX_DIGITS - AMOUNT_DECIMAL_PLACES:
        raise ReportValidationError(record_id, f"amount {value!r} exceeds {AMOUNT_MAX_DIGITS} digits")
    if amount != amount.quantize(CENT):
        raise ReportValidationError(record_id, f"amount {value!r} has more than {AMOUNT_DECIMAL_PLACES} decimal places")
    return amount


def _parse_type(record_id: Any, value: Any) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value).strip().lower())
    except ValueError as exc:
        raise ReportValidationError(record_id, f"unknown transaction type {value!r}") from exc


def _parse_owner(value: Any) -> TransactionOwner | None:
    if value is None or isinstance(value, TransactionOwner):
        return value
    if isinstance(value, Mapping):
        return TransactionOwner(email=value.get("email"), name=value.get("name"))
    return TransactionOwner(email=getattr(value, "email", None), name=getattr(value, "name", None))


def coerce_transaction(raw: Mapping[str, Any]) -> LedgerTransaction:
    """Build a validated ``LedgerTransaction`` from a loosely typed row.

    Raises ``ReportValidationError`` naming the record when the date cannot be
    parsed, the amount is negative, not a number or does not fit the
    ``Numeric(12, 2)`` column, the type is unknown, a text field is too long,
    or an expenditure carries no category. Category and description are
    stripped; a naive ``created_at`` is taken as UTC.
    """
    record_id = raw.get("id")
    tx_type = _parse_type(record_id, raw.get("type"))
    category = _parse_text(record_id, "category", raw.get("category"), CATEGORY_MAX_LENGTH) or None
    if tx_type == TransactionType.EXPENDITURE and category is None:
        raise ReportValidationError(record_id, "expenditure requires a category")

    return LedgerTransaction(
        id=record_id,
        date=_parse_date(record_id, raw.get("date")),
        type=tx_type,
        amount=_parse_amount(record_id, raw.get("amount")),
        description=_parse_text(record_id, "description", raw.get("description"), DESCRIPTION_MAX_LENGTH) or "",
        category=category,
        created_at=_parse_created_at(record_id, raw.get("created_at")),
        owner=_parse_owner(raw.get("owner", raw.get("user"))),
    )


def validate_records(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[LedgerTransaction], list[str]]:
    valid: list[LedgerTransaction] = []
    errors: list[str] = []
    for row in rows:
        try:
            valid.append(coerce_transaction(row))
        except ReportValidationError as exc:
            errors.append(str(exc))

    if errors:
        logger.warning("Rejected %d of %d transaction records", len(errors), len(errors) + len(valid))
    return valid, errors


def filter_by_range(
    transactions: Iterable[LedgerTransaction],
    date_range: DateRange | None = None,
) -> list[LedgerTransaction]:
    if date_range is None:
        return list(transactions)
    return [item for item in transactions if date_range.contains(item.date)]


def _sum_amounts(transactions: Iterable[LedgerTransaction], tx_type: TransactionType) -> Decimal:
    total = ZERO
    for item in transactions:
        if item.type == tx_type:
            total += item.amount
    return total


def compute_summary(
    transactions: Iterable[LedgerTransaction],
    date_range: DateRange | None = None,
) -> Summary:
    included = filter_by_range(transactions, date_range)
    total_income = _sum_amounts(included, TransactionType.INCOME)
    total_expenditure = _sum_amounts(included, TransactionType.EXPENDITURE)
    return Summary(
        total_income=total_income,
        total_expenditure=total_expenditure,
        net_balance=total_income - total_expenditure,
        transaction_count=len(included),
    )


def combine_summaries(first: Summary, second: Summary) -> Summary:
    total_income = first.total_income + second.total_income
    total_expenditure = first.total_expenditure + second.total_expenditure
    return Summary(
        total_income=total_income,
        total_expenditure=total_expenditure,
        net_balance=total_income - total_expenditure,
        transaction_count=first.transaction_count + second.transaction_count,
    )


def reporting_year(date_range: DateRange | None, today: dt.date | None = None) -> int:
    if date_range is not None and date_range.start is not None:
        return date_range.start.year
    if date_range is not None and date_range.end is not None:
        return date_range.end.year
    return (today or dt.date.today()).year


def compute_monthly_breakdown(
    transactions: Iterable[LedgerTransaction],
    year: int,
    date_range: DateRange | None = None,
) -> list[MonthlyBreakdown]:
    """Return twelve zero-filled entries, January first.

    A transaction counts when it passes ``date_range`` and its date falls in
    ``year``.
    """
    income = [ZERO] * 12
    expenditure = [ZERO] * 12

    for item in filter_by_range(transactions, date_range):
        if item.date.year != year:
            continue
        index = item.date.month - 1
        if item.type == TransactionType.INCOME:
            income[index] += item.amount
        elif item.type == TransactionType.EXPENDITURE:
            expenditure[index] += item.amount

    return [
        MonthlyBreakdown(month=f"{label} {year}", income=income[index], expenditure=expenditure[index])
        for index, label in enumerate(MONTH_LABELS)
    ]


def compute_category_breakdown(
    transactions: Iterable[LedgerTransaction],
    date_range: DateRange | None = None,
) -> list[CategoryBreakdown]:
    # dicts keep first-appearance order
    totals: dict[str, Decimal] = {}
    for item in filter_by_range(transactions, date_range):
        if item.type != TransactionType.EXPENDITURE:
            continue
        key = item.category if item.category is not None else ""
        totals[key] = totals.get(key, ZERO) + item.amount

    total_expenditure = sum(totals.values(), ZERO)
    breakdown: list[CategoryBreakdown] = []
    for category, amount in totals.items():
        percentage = amount / total_expenditure * HUNDRED if total_expenditure > 0 else ZERO
        breakdown.append(CategoryBreakdown(category=category, amount=amount, percentage=percentage))
    return breakdown


def user_prefix(owner: TransactionOwner | None) -> str:
    if owner is None:
        return ""
    if owner.email:
        return owner.email[:USER_PREFIX_LENGTH]
    if owner.name:
        return owner.name[:USER_PREFIX_LENGTH]
    return ""


EARLIEST = dt.datetime.min.replace(tzinfo=dt.timezone.utc)


def _created_key(item: LedgerTransaction) -> tuple[bool, dt.datetime]:
    if item.created_at is None:
        return False, EARLIEST
    return True, _as_utc(item.created_at)


def select_recent_highlights(
    transactions: Iterable[LedgerTransaction],
    n: int,
) -> list[Highlight]:
    if n <= 0:
        return []
    newest_first = sorted(transactions, key=_created_key, reverse=True)
    return [Highlight(transaction=item, user_prefix=user_prefix(item.owner)) for item in newest_first[:n]]


def build_financial_report(
    transactions: Sequence[LedgerTransaction],
    date_range: DateRange,
    business_name: str,
    today: dt.date | None = None,
) -> FinancialReport:
    prepared_on = today or dt.date.today()
    included = filter_by_range(transactions, date_range)
    year = reporting_year(date_range, prepared_on)

    report = FinancialReport(
        business_name=business_name,
        period=date_range,
        prepared_on=prepared_on,
        year=year,
        summary=compute_summary(included),
        income_lines=[item for item in included if item.type == TransactionType.INCOME],
        expenditure_lines=[item for item in included if item.type == TransactionType.EXPENDITURE],
        monthly=compute_monthly_breakdown(included, year),
        categories=compute_category_breakdown(included),
    )
    logger.info(
        "Built financial report for %s (%s..%s): %d transactions",
        business_name,
        date_range.start,
        date_range.end,
        report.summary.transaction_count,
    )
    return report
