from datetime import date, datetime, timedelta

AUDIT_TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M:%S"


def audit_timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime(AUDIT_TIMESTAMP_FORMAT)


def parse_event_date(code: str) -> date:
    """
    Parse a ``ddmmyy`` event date leniently.
    Out-of-range parts roll over instead of failing (day 00 is the last day of the
    previous month, month 00 is December of the previous year), so every code the
    validators accept maps to exactly one calendar day.
    """
    if len(code) != 6 or not (code.isascii() and code.isdigit()):
        raise ValueError(f"not a ddmmyy date: {code!r}")
    day, month, year = int(code[0:2]), int(code[2:4]), 2000 + int(code[4:6])
    first_of_month = date(year + (month - 1) // 12, (month - 1) % 12 + 1, 1)
    return first_of_month + timedelta(days=day - 1)
