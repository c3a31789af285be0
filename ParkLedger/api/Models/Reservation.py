from datetime import datetime

ACTIVE = "Active"
CONFIRMED = "Confirmed"
CANCELLED = "Cancelled"

RESERVATION_STATUSES = (ACTIVE, CONFIRMED, CANCELLED)


class Reservation:

    def __init__(self,
                 id: int,
                 user_id: int,
                 parking_lot_id: int,
                 vehicle_id: int,
                 start_time: datetime,
                 end_time: datetime,
                 status: str,
                 created_at: datetime,
                 cost: float):

        self.id = id
        self.user_id = user_id
        self.parking_lot_id = parking_lot_id
        self.vehicle_id = vehicle_id
        self.start_time = start_time
        self.end_time = end_time
        self.status = status
        self.created_at = created_at
        self.cost = cost


    @property
    def holder(self) -> str:
        return f"reservation:{self.id}"


    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "parking_lot_id": self.parking_lot_id,
            "vehicle_id": self.vehicle_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "cost": self.cost,
        }
