from .domain.repositories import PartitionRepository
from .models import EventType

# Suffixes are appended to the owning city's code, e.g. "TOR" + "M010122".
SAMPLE_SLOTS: dict[EventType, list[tuple[str, int]]] = {
    EventType.ART_GALLERY: [
        ("M010122", 10),
        ("M020122", 20),
        ("A030122", 30),
        ("E040122", 40),
        ("E050122", 50),
    ],
    EventType.CONCERTS: [
        ("M060122", 10),
        ("M070122", 20),
        ("A080122", 30),
    ],
    EventType.THEATRE: [
        ("M090122", 10),
        ("M100122", 20),
        ("A110122", 30),
    ],
}


def seed_sample_slots(repo: PartitionRepository) -> int:
    created = 0
    with repo.transaction():
        for kind, slots in SAMPLE_SLOTS.items():
            for suffix, capacity in slots:
                repo.create(f"{repo.city}{suffix}", kind, capacity)
                created += 1
    return created
