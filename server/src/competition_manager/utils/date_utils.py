"""Calendar helpers shared by deadlines, emails and certificates"""

from datetime import date, datetime, timezone


def utc_today() -> date:
    """Today's date in UTC; every deadline and issue date uses this clock"""
    return datetime.now(timezone.utc).date()


def format_long_date(day: date) -> str:
    return day.strftime("%B %d, %Y")
