"""Day references for picking a log file.

Supports:
- ISO format: "2025-01-15"
- Relative: "3 days ago", "1 week ago"
- Named: "today", "yesterday"

All dates are local server dates, matching the day file names.
"""

import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateparser
from dateutil.relativedelta import relativedelta


def parse_day_reference(ref: str, today: date | None = None) -> date:
    """Parse a human-friendly day reference.

    Args:
        ref: Day reference string
        today: Reference point for relative days (default: local today)

    Raises:
        ValueError: If the reference cannot be parsed

    Examples:
        >>> parse_day_reference("2025-01-15")
        datetime.date(2025, 1, 15)
    """
    if today is None:
        today = datetime.now().date()

    ref = ref.strip().lower()

    if ref == "today":
        return today
    if ref == "yesterday":
        return today - timedelta(days=1)

    ago_match = re.match(r"(\d+)\s*(day|week|month)s?\s*ago", ref)
    if ago_match:
        amount = int(ago_match.group(1))
        unit = ago_match.group(2)

        if unit == "day":
            return today - timedelta(days=amount)
        elif unit == "week":
            return today - timedelta(weeks=amount)
        elif unit == "month":
            return today - relativedelta(months=amount)

    try:
        return dateparser.parse(ref).date()
    except (ValueError, OverflowError, dateparser.ParserError) as e:
        raise ValueError(f"Cannot parse day reference: {ref}") from e
