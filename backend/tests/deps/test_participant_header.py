import pytest
from reservation_node.deps import get_participant_id, require_admin
from fastapi import HTTPException


def test_missing_header_is_unauthorized() -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_participant_id(None)
    assert excinfo.value.status_code == 401


def test_too_short_id_is_rejected() -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_participant_id("TOR")
    assert excinfo.value.status_code == 400


def test_participant_id_passes_through() -> None:
    assert get_participant_id("TORU000001") == "TORU000001"


def test_require_admin() -> None:
    assert require_admin("TORA000001") == "TORA000001"
    with pytest.raises(HTTPException) as excinfo:
        require_admin("TORU000001")
    assert excinfo.value.status_code == 403


@pytest.mark.parametrize("participant_id", ["TORU 000001", "TORU000001\t", "TORU\n000001"])
def test_participant_id_must_be_one_token(participant_id: str) -> None:
    with pytest.raises(HTTPException) as excinfo:
        get_participant_id(participant_id)
    assert excinfo.value.status_code == 400
