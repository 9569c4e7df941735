import datetime as dt

from app.services.reporting import DateRange


def resolve_date_range(start_date: dt.date | None, end_date: dt.date | None) -> DateRange:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValueError("start_date must not be after end_date")
    return DateRange(start=start_date, end=end_date)


def format_period(date_range: DateRange) -> str:
    start = date_range.start.isoformat() if date_range.start else "beginning"
    end = date_range.end.isoformat() if date_range.end else "today"
    return f"{start} – {end}"
