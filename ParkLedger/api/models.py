from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Union
from datetime import datetime


class ParkingLotCreate(BaseModel):
    name: str = Field(..., max_length=100)
    location: str = ""
    address: str = ""
    capacity: int = Field(..., ge=0)
    tariff: Union[int, float] = Field(..., ge=0)
    daytariff: Union[int, float] = Field(0, ge=0)
    coordinates: Optional[List[float]] = Field(None, min_length=2, max_length=2)


class ParkingLotUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = None
    address: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    tariff: Optional[Union[int, float]] = Field(None, ge=0)
    daytariff: Optional[Union[int, float]] = Field(None, ge=0)
    coordinates: Optional[List[float]] = Field(None, min_length=2, max_length=2)


class VehicleCreate(BaseModel):
    user_id: int
    licenseplate: str = Field(..., min_length=1, max_length=20)
    make: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    year: Optional[int] = None


class SessionStart(BaseModel):
    licenseplate: str = Field(..., min_length=1, max_length=20)


class ReservationBody(BaseModel):
    user_id: int
    parking_lot_id: int
    vehicle_id: int
    start_time: datetime
    end_time: datetime
    status: Optional[str] = None
    cost: Optional[float] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class PaySingleSession(BaseModel):
    session_id: int
    licenseplate: str = Field(..., min_length=1, max_length=20)
    method: str = "card"
    bank: str = "internal"


class PayAggregate(BaseModel):
    licenseplate: str = Field(..., min_length=1, max_length=20)
    method: str = "card"
    bank: str = "internal"
