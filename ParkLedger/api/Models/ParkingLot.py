from datetime import datetime
from .ParkingLotCoordinates import ParkingLotCoordinates

class ParkingLot:

    def __init__(self,
                 id: int,
                 name: str,
                 location: str,
                 address: str,
                 capacity: int,
                 reserved: int,
                 tariff: float,
                 daytariff: float,
                 coordinates: ParkingLotCoordinates,
                 created_at: datetime):

        self.id = id
        self.name = name
        self.location = location
        self.address = address
        self.capacity = capacity
        self.reserved = reserved
        self.tariff = tariff
        self.daytariff = daytariff
        self.coordinates = coordinates
        self.created_at = created_at


    @property
    def available(self) -> int:
        return self.capacity - self.reserved


    @property
    def is_full(self) -> bool:
        return self.reserved >= self.capacity


    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "address": self.address,
            "capacity": self.capacity,
            "reserved": self.reserved,
            "tariff": self.tariff,
            "daytariff": self.daytariff,
            "coordinates": self.coordinates.to_list() if self.coordinates else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


    def __repr__(self):
        return f"ParkingLot({self.id}, {self.name}, {self.reserved}/{self.capacity})"
