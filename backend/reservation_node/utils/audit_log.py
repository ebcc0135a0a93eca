from __future__ import annotations

import logging
import os
from typing import Literal, Protocol, Sequence

AuditOperation = Literal[
    "addReservationSlot",
    "removeReservationSlot",
    "listReservationSlotAvailable",
    "reserveTicket",
    "getEventSchedule",
    "cancelTicket",
    "exchangeTickets",
]

SEPARATOR = "-" * 40


class AuditSink(Protocol):
    def info(self, msg: str) -> None: ...


def get_audit_logger(city: str, directory: str) -> logging.Logger:
    """Return the append-only ``<city>-log`` writer for a node, re-pointing it if the directory changed."""
    path = os.path.abspath(os.path.join(directory, f"{city}-log"))
    logger = logging.getLogger(f"audit.{city}")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        if getattr(handler, "baseFilename", None) != path:
            logger.removeHandler(handler)
            handler.close()
    if not logger.handlers:
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


def format_audit_entry(
    *,
    timestamp: str,
    operation: AuditOperation,
    parameters: Sequence[str],
    success: bool,
    response: str,
) -> str:
    # Parameter names only; values never reach the audit file.
    return "\n".join(
        [
            SEPARATOR,
            f"Date and time: {timestamp}",
            f"Request type: {operation}",
            f"Request parameters: {', '.join(parameters)}",
            f"Success: {str(success).lower()}",
            f"Server response: {response}",
            "",
        ]
    )


def emit_audit_log(
    sink: AuditSink,
    *,
    timestamp: str,
    operation: AuditOperation,
    parameters: Sequence[str],
    success: bool,
    response: str,
) -> None:
    """Append one audit entry. Raises RuntimeError if logging fails."""
    entry = format_audit_entry(
        timestamp=timestamp,
        operation=operation,
        parameters=parameters,
        success=success,
        response=response,
    )
    try:
        sink.info(entry)
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
