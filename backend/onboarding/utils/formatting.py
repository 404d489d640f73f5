"""Text helpers shared by the document builder, CSV export and routers."""

import secrets
import time
from datetime import date, datetime, timedelta, timezone

BLANK_DATE = "________________"
DOC_ID_PREFIX = "SGM"

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_HTML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})


def escape_html(value) -> str:
    """Escape a value for interpolation into HTML text or attribute content.

    Not idempotent: escaping an already escaped string escapes the ampersands
    again, so call it once per interpolation site.
    """
    if value is None:
        return ""
    return str(value).translate(_HTML_ESCAPES)


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def doc_id() -> str:
    """Generate a document id like ``SGM-LZ1K2M3N-4F9QX``."""
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{DOC_ID_PREFIX}-{stamp}-{suffix}"


def format_currency(amount: float) -> str:
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_long_date(value: str | None) -> str:
    """Render an ISO date as ``January 5, 2025``; blank line when unknown."""
    parsed = _parse_date(value)
    if parsed is None:
        return BLANK_DATE
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def add_months(value: str | None, months: int) -> str | None:
    """Shift an ISO date by whole months, rolling day overflow forward.

    Jan 31 plus one month lands on Mar 3 (Mar 2 in leap years).
    """
    parsed = _parse_date(value)
    if parsed is None:
        return None
    month_index = parsed.month - 1 + months
    year = parsed.year + month_index // 12
    month = month_index % 12 + 1
    shifted = date(year, month, 1) + timedelta(days=parsed.day - 1)
    return shifted.isoformat()


def today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
