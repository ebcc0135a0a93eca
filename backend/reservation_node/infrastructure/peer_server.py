from __future__ import annotations

import logging
import socketserver
import threading
from typing import TYPE_CHECKING

from ..domain.errors import PeerProtocolError
from .protocol import ENCODING, MAX_DATAGRAM_SIZE, decode_request

if TYPE_CHECKING:
    from ..node import ReservationNode

logger = logging.getLogger(__name__)


class PeerRequestHandler(socketserver.BaseRequestHandler):
    server: "PeerServer"

    def handle(self) -> None:
        data, sock = self.request
        try:
            answer = self.server.node.answer_peer(decode_request(data))
        except PeerProtocolError as exc:
            logger.warning("ignoring datagram from %s: %s", self.client_address, exc)
            return
        reply = answer.encode(ENCODING)
        if len(reply) > MAX_DATAGRAM_SIZE:
            logger.warning("reply to %s truncated from %d bytes", self.client_address, len(reply))
        sock.sendto(reply[:MAX_DATAGRAM_SIZE], self.client_address)


class PeerServer(socketserver.ThreadingUDPServer):
    """UDP listener answering the other city nodes, one thread per datagram."""

    daemon_threads = True
    max_packet_size = MAX_DATAGRAM_SIZE

    def __init__(self, address: tuple[str, int], node: "ReservationNode") -> None:
        self.node = node
        self._thread: threading.Thread | None = None
        super().__init__(address, PeerRequestHandler)

    @property
    def port(self) -> int:
        return self.server_address[1]

    def serve_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.serve_forever, name=f"peer-server-{self.node.city}", daemon=True)
        thread.start()
        self._thread = thread
        logger.info("%s answering peers on %s:%d", self.node.city, *self.server_address[:2])
        return thread

    def close(self) -> None:
        if self._thread is not None:
            self.shutdown()
            self._thread.join()
            self._thread = None
        self.server_close()
