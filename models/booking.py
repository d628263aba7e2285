from dataclasses import dataclass, field
from typing import List, Optional

from scheduling.slots import split_stored_slots


class BookingStatus:
    BOOKED = "booked"
    ARRIVED = "arrived"
    CANCELLATION_REQUESTED = "cancellation_requested"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    ALL = (BOOKED, ARRIVED, CANCELLATION_REQUESTED, CANCELLED, COMPLETED)
    TERMINAL = (CANCELLED, COMPLETED)


@dataclass
class Booking:
    id: str
    court_id: int
    date: str  # YYYY-MM-DD
    time_slot: str  # one label, or several joined by " & "
    customer_name: str
    customer_phone: str
    status: str = BookingStatus.BOOKED
    # set when a "user" account made the booking; staff bookings leave it empty
    user_email: Optional[str] = None
    created_at: Optional[str] = field(default=None, compare=False)

    @property
    def slots(self) -> List[str]:
        return split_stored_slots(self.time_slot)

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "courtId": self.court_id,
            "date": self.date,
            "timeSlot": self.time_slot,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "status": self.status,
        }
        if self.user_email:
            out["userEmail"] = self.user_email
        if self.created_at:
            out["createdAt"] = self.created_at
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Booking":
        return cls(
            id=str(data["id"]),
            court_id=int(data["courtId"]),
            date=data["date"],
            time_slot=data["timeSlot"],
            customer_name=data.get("customerName", ""),
            customer_phone=data.get("customerPhone", ""),
            status=data.get("status", BookingStatus.BOOKED),
            user_email=data.get("userEmail"),
            created_at=data.get("createdAt"),
        )
