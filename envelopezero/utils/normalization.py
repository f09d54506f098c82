"""
Input normalization helpers

Shared by the auth, projection and assignment services so that emails and
month keys are interpreted identically everywhere.
"""

import re
from datetime import date

from envelopezero.core.errors import ValidationError

_MONTH_RE = re.compile(r"([0-9]{4})-([0-9]{2})")
# Leaves room for the following month within date.max
MAX_MONTH_YEAR = 9998


def normalize_email(value: str | None) -> str:
    """
    Normalize an email address for lookup and storage

    - surrounding whitespace removed
    - lowercased

    Args:
        value: raw email as submitted

    Returns:
        normalized email

    Raises:
        ValidationError: empty input or no ``@``

    Example:
        >>> normalize_email("  Alice@Example.COM ")
        "alice@example.com"
    """
    email = (value or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationError("A valid email is required")
    return email


def parse_month(value: str) -> date:
    """
    Parse a ``YYYY-MM`` month key into the first day of that month

    Args:
        value: month key, e.g. ``"2026-02"``

    Returns:
        ``date`` on day 1 of the month

    Raises:
        ValidationError: any other shape (``"2026/02"``, ``"2026-2"``, ``"2026-13"``)

    Example:
        >>> parse_month("2026-02")
        datetime.date(2026, 2, 1)
    """
    match = _MONTH_RE.fullmatch(value or "")
    if not match:
        raise ValidationError("month must be YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or not 1 <= year <= MAX_MONTH_YEAR:
        raise ValidationError("month must be YYYY-MM")
    return date(year, month, 1)


def format_month(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def next_month(value: date) -> date:
    if value.month == 12:
        return date(value.year + 1, 1, 1)
    return date(value.year, value.month + 1, 1)
