from fastapi import Depends, Header, HTTPException, Request, status

from .node import ReservationNode
from .utils.auth import ADMIN_FLAG_POSITION, is_admin


def get_node(request: Request) -> ReservationNode:
    return request.app.state.node


def get_participant_id(x_participant_id: str | None = Header(default=None)) -> str:
    if x_participant_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-Participant-Id header required")
    # Ids travel unquoted in peer datagrams, so they must be a single token.
    if len(x_participant_id) <= ADMIN_FLAG_POSITION or any(ch.isspace() for ch in x_participant_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-Participant-Id")
    return x_participant_id


def require_admin(participant_id: str = Depends(get_participant_id)) -> str:
    if not is_admin(participant_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="admin participant required")
    return participant_id
