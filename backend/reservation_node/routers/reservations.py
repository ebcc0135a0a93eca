from fastapi import APIRouter, Depends

from ..deps import get_node, get_participant_id
from ..node import ReservationNode
from ..schemas import CheckRead, ExchangeCreate, OperationRead, OptionsRead, ReservationCreate

router = APIRouter(prefix="", tags=["reservations"])


@router.post("/reservations", response_model=OperationRead)
def reserve_ticket(
    payload: ReservationCreate,
    node: ReservationNode = Depends(get_node),
    participant_id: str = Depends(get_participant_id),
) -> OperationRead:
    result = node.reserve_ticket(participant_id, payload.event_id, payload.event_type)
    return OperationRead.from_result(result)


@router.delete("/reservations/{event_id}", response_model=OperationRead)
def cancel_ticket(
    event_id: str,
    node: ReservationNode = Depends(get_node),
    participant_id: str = Depends(get_participant_id),
) -> OperationRead:
    return OperationRead.from_result(node.cancel_ticket(participant_id, event_id))


@router.post("/reservations/exchange", response_model=OperationRead)
def exchange_tickets(
    payload: ExchangeCreate,
    node: ReservationNode = Depends(get_node),
    participant_id: str = Depends(get_participant_id),
) -> OperationRead:
    result = node.exchange_tickets(participant_id, payload.event_id, payload.new_event_id, payload.new_event_type)
    return OperationRead.from_result(result)


@router.get("/me/schedule", response_model=OperationRead)
def get_event_schedule(
    node: ReservationNode = Depends(get_node),
    participant_id: str = Depends(get_participant_id),
) -> OperationRead:
    return OperationRead.from_result(node.get_event_schedule(participant_id))


@router.get("/me/options", response_model=OptionsRead)
def show_options(
    node: ReservationNode = Depends(get_node),
    participant_id: str = Depends(get_participant_id),
) -> OptionsRead:
    return OptionsRead(options=node.show_options(node.is_admin(participant_id)))


@router.get("/participants/{user_id}/admin", response_model=CheckRead)
def is_admin(user_id: str, node: ReservationNode = Depends(get_node)) -> CheckRead:
    return CheckRead(value=node.is_admin(user_id))


@router.get("/events/{event_id}/city", response_model=CheckRead)
def check_city(event_id: str, node: ReservationNode = Depends(get_node)) -> CheckRead:
    return CheckRead(value=node.check_city(event_id))
