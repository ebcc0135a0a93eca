"""
Text datagram grammar spoken between city nodes.

A request is a one-letter opcode followed by space-separated arguments. The last
argument takes the rest of the line, so event types containing a space
("Art Gallery") travel unquoted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ..domain.errors import PeerProtocolError
from ..domain.repositories import ProbeResult

MAX_DATAGRAM_SIZE = 1000
ENCODING = "utf-8"


class Opcode(StrEnum):
    AVAILABILITY = "A"
    SCHEDULE = "P"
    PROBE = "C"
    COMMIT = "R"
    REVOKE = "X"


ARITY: dict[Opcode, int] = {
    Opcode.AVAILABILITY: 1,
    Opcode.SCHEDULE: 1,
    Opcode.PROBE: 3,
    Opcode.COMMIT: 3,
    Opcode.REVOKE: 2,
}


@dataclass(frozen=True)
class PeerRequest:
    opcode: Opcode
    args: tuple[str, ...]


def encode_request(opcode: Opcode, *args: str) -> bytes:
    if len(args) != ARITY[opcode]:
        raise ValueError(f"opcode {opcode} takes {ARITY[opcode]} arguments, got {len(args)}")
    return " ".join((opcode.value, *args)).encode(ENCODING)


def decode_request(data: bytes) -> PeerRequest:
    try:
        text = data.decode(ENCODING).strip()
    except UnicodeDecodeError as exc:
        raise PeerProtocolError("request is not valid text") from exc
    code, _, rest = text.partition(" ")
    try:
        opcode = Opcode(code)
    except ValueError:
        raise PeerProtocolError(f"unknown opcode {code!r}") from None
    args = tuple(rest.split(" ", ARITY[opcode] - 1)) if rest else ()
    if len(args) != ARITY[opcode] or not all(args):
        raise PeerProtocolError(f"malformed {opcode} request: {text!r}")
    return PeerRequest(opcode=opcode, args=args)


def encode_probe_reply(result: ProbeResult) -> str:
    return f"{int(result.exists)} {int(result.booked)}"


def decode_probe_reply(text: str) -> ProbeResult:
    flags = text.split()
    if len(flags) != 2 or any(flag not in ("0", "1") for flag in flags):
        raise PeerProtocolError(f"malformed probe reply: {text!r}")
    return ProbeResult(exists=flags[0] == "1", booked=flags[1] == "1")
