from datetime import datetime
from typing import Optional

PENDING = "Pending"
PAID = "Paid"
COMPLETED = "Completed"

PAYMENT_STATUSES = (PENDING, PAID, COMPLETED)


class Session:

    def __init__(self,
                 id: int,
                 parking_lot_id: int,
                 licenseplate: str,
                 username: str,
                 started: datetime,
                 stopped: Optional[datetime] = None,
                 duration_minutes: int = 0,
                 cost: float = 0.0,
                 payment_status: str = PENDING,
                 reservation_id: Optional[int] = None):

        self.id = id
        self.parking_lot_id = parking_lot_id
        self.licenseplate = licenseplate
        self.username = username
        self.started = started
        self.stopped = stopped
        self.duration_minutes = duration_minutes
        self.cost = cost
        self.payment_status = payment_status
        self.reservation_id = reservation_id


    @property
    def is_active(self) -> bool:
        return self.stopped is None


    def to_dict(self):
        return {
            "id": self.id,
            "parking_lot_id": self.parking_lot_id,
            "licenseplate": self.licenseplate,
            "username": self.username,
            "started": self.started.isoformat(),
            "stopped": self.stopped.isoformat() if self.stopped else None,
            "duration_minutes": self.duration_minutes,
            "cost": self.cost,
            "payment_status": self.payment_status,
            "reservation_id": self.reservation_id,
        }


    def __repr__(self):
        return f"Session({self.id}, {self.licenseplate}, {self.payment_status})"
