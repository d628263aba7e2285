from dataclasses import dataclass
from typing import Iterable, Optional

UNKNOWN_COURT_NAME = "Unknown"


@dataclass(frozen=True)
class Court:
    id: int
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Court":
        return cls(id=int(data["id"]), name=str(data["name"]))


def find_court(courts: Iterable[Court], court_id: int) -> Optional[Court]:
    return next((c for c in courts if c.id == court_id), None)


def court_name(courts: Iterable[Court], court_id: int) -> str:
    # bookings may outlive the court they reference
    court = find_court(courts, court_id)
    return court.name if court else UNKNOWN_COURT_NAME
