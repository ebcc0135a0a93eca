class ReservationError(Exception):
    """Base class for failures reported back to the caller as a result string."""


class InvalidRequestError(ReservationError):
    pass


class ForeignEventError(ReservationError):
    pass


class SlotExistsError(ReservationError):
    pass


class SlotNotFoundError(ReservationError):
    pass


class SlotBookedError(ReservationError):
    pass


class SlotFullError(ReservationError):
    pass


class AlreadyBookedError(ReservationError):
    pass


class NotBookedError(ReservationError):
    pass


class SameDayConflictError(ReservationError):
    pass


class WeeklyLimitError(ReservationError):
    pass


class ExchangeError(ReservationError):
    pass


class PeerError(Exception):
    """Raised when a peer node cannot be asked or answers garbage."""


class PeerUnavailableError(PeerError):
    def __init__(self, city: str, reason: object) -> None:
        self.city = city
        self.reason = reason
        super().__init__(f"peer {city} unavailable: {reason}")


class PeerProtocolError(PeerError):
    pass
