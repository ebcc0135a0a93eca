from __future__ import annotations

import logging
import socket
import time
from typing import Mapping

from ..domain.errors import PeerUnavailableError
from ..domain.repositories import PeerGateway, ProbeResult
from ..models import City, EventType
from .protocol import ENCODING, MAX_DATAGRAM_SIZE, Opcode, decode_probe_reply, encode_request

logger = logging.getLogger(__name__)


class UdpPeerGateway(PeerGateway):
    """
    Request/reply client for the other city nodes.

    Every call waits at most ``timeout`` seconds per attempt. Idempotent queries
    are retried ``retries`` times with a linearly growing pause; the commit is sent
    once because a duplicated reservation cannot be told apart from a real one.
    """

    def __init__(
        self,
        city: City,
        ports: Mapping[str, int],
        *,
        host: str = "localhost",
        timeout: float = 2.0,
        retries: int = 2,
        backoff: float = 0.2,
    ) -> None:
        self.city = city
        self.ports = ports
        self.host = host
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff

    def query_availability(self, city: City, event_type: EventType) -> str:
        return self._request(city, encode_request(Opcode.AVAILABILITY, event_type.value))

    def query_schedule(self, city: City, participant_id: str) -> str:
        return self._request(city, encode_request(Opcode.SCHEDULE, participant_id))

    def probe(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> ProbeResult:
        reply = self._request(city, encode_request(Opcode.PROBE, participant_id, event_id, event_type.value))
        return decode_probe_reply(reply)

    def commit(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> str:
        payload = encode_request(Opcode.COMMIT, participant_id, event_id, event_type.value)
        return self._request(city, payload, retries=0)

    def revoke(self, city: City, participant_id: str, event_id: str) -> str:
        return self._request(city, encode_request(Opcode.REVOKE, participant_id, event_id))

    def _request(self, city: City, payload: bytes, *, retries: int | None = None) -> str:
        if city == self.city:
            raise ValueError("a node does not send peer requests to itself")
        port = self.ports.get(city)
        if port is None:
            raise PeerUnavailableError(city, "no port configured")
        attempts = (self.retries if retries is None else retries) + 1
        last_error: OSError | None = None
        for attempt in range(1, attempts + 1):
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
                sock.settimeout(self.timeout)
                try:
                    sock.sendto(payload, (self.host, port))
                    data, _ = sock.recvfrom(MAX_DATAGRAM_SIZE)
                    return data.decode(ENCODING, errors="replace")
                except OSError as exc:
                    last_error = exc
                    logger.warning(
                        "peer %s did not answer %r (attempt %d/%d): %s",
                        city,
                        payload[:1].decode(ENCODING),
                        attempt,
                        attempts,
                        exc,
                    )
            if attempt < attempts:
                time.sleep(self.backoff * attempt)
        raise PeerUnavailableError(city, last_error)
