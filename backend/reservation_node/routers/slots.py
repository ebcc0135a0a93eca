from fastapi import APIRouter, Depends, Query

from ..deps import get_node, require_admin
from ..node import ReservationNode
from ..schemas import OperationRead, SlotCreate

router = APIRouter(prefix="/slots", tags=["slots"])


@router.post("", response_model=OperationRead)
def add_reservation_slot(
    payload: SlotCreate,
    node: ReservationNode = Depends(get_node),
    admin_id: str = Depends(require_admin),
) -> OperationRead:
    result = node.add_reservation_slot(payload.event_id, payload.event_type, payload.capacity)
    return OperationRead.from_result(result)


@router.delete("/{event_id}", response_model=OperationRead)
def remove_reservation_slot(
    event_id: str,
    event_type: str = Query(..., description="Concerts, Art Gallery or Theatre"),
    node: ReservationNode = Depends(get_node),
    admin_id: str = Depends(require_admin),
) -> OperationRead:
    return OperationRead.from_result(node.remove_reservation_slot(event_id, event_type))


@router.get("/availability", response_model=OperationRead)
def list_reservation_slot_available(
    event_type: str = Query(..., description="Concerts, Art Gallery or Theatre"),
    node: ReservationNode = Depends(get_node),
    admin_id: str = Depends(require_admin),
) -> OperationRead:
    """Remaining capacity per event across all three cities, one ``EventID remaining`` line each."""
    return OperationRead.from_result(node.list_reservation_slot_available(event_type))
