"""Identity conventions: a participant id starts with its home city, and index 3 marks admins."""

ADMIN_FLAG_POSITION = 3
ADMIN_FLAG = "A"


def home_city(participant_id: str) -> str:
    return participant_id[:3]


def is_local_participant(participant_id: str, city: str) -> bool:
    return home_city(participant_id) == city


def is_admin(participant_id: str) -> bool:
    return len(participant_id) > ADMIN_FLAG_POSITION and participant_id[ADMIN_FLAG_POSITION] == ADMIN_FLAG
