from ..models import City, EventType, TimeOfDay, event_city
from .errors import InvalidRequestError

EVENT_ID_LENGTH = 10

# Bounds are not calendar-exact; parse_event_date rolls over codes such as
# day 00 or 30 February.
MAX_DAY = 30
MAX_MONTH = 12
MAX_YEAR = 25


def validate_event_type(event_type: str) -> EventType:
    try:
        return EventType(event_type)
    except ValueError:
        raise InvalidRequestError("Invalid event type") from None


def validate_event_id(event_id: str) -> str:
    """
    Run the ordered event id checks: length, city, time of day, date.
    The first failing rule decides the rejection reason.
    """
    if len(event_id) != EVENT_ID_LENGTH:
        raise InvalidRequestError("Invalid event ID")
    if not is_known_city(event_id):
        raise InvalidRequestError("Invalid city")
    if event_id[3] not in {t.value for t in TimeOfDay}:
        raise InvalidRequestError("Invalid time of day")
    if not _is_valid_date(event_id[4:]):
        raise InvalidRequestError("Invalid date")
    return event_id


def validate_event(event_id: str, event_type: str) -> EventType:
    kind = validate_event_type(event_type)
    validate_event_id(event_id)
    return kind


def is_known_city(event_id: str) -> bool:
    return event_city(event_id) in {c.value for c in City}


def _is_valid_date(code: str) -> bool:
    if not (code.isascii() and code.isdigit()):
        return False
    day, month, year = int(code[0:2]), int(code[2:4]), int(code[4:6])
    return 0 <= day <= MAX_DAY and 0 <= month <= MAX_MONTH and 0 <= year <= MAX_YEAR
