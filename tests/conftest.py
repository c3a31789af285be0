from datetime import datetime, timedelta

import pytest

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessVehicles import AccessVehicles
from ParkLedger.api.Models.Vehicle import Vehicle
from ParkLedger.api.Services import ParkingLotService


class FakeClock:
    def __init__(self, start=datetime(2025, 1, 1, 9, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def conn(tmp_path):
    c = DBConnection(str(tmp_path / "test.db"))
    yield c
    c.close_connection()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def make_lot(conn, clock):
    service = ParkingLotService(conn, clock=clock)

    def _make(capacity=10, tariff=2.0, daytariff=10.0, name="Test Lot"):
        return service.create(
            name=name,
            location="Rotterdam",
            address="Wijnhaven 107",
            capacity=capacity,
            tariff=tariff,
            daytariff=daytariff,
            coordinates=[51.917, 4.484],
        )
    return _make


@pytest.fixture()
def make_vehicle(conn, clock):
    access_vehicles = AccessVehicles(conn=conn)

    def _make(licenseplate="AB-123-C", user_id=1):
        vehicle = Vehicle(
            id=None,
            user_id=user_id,
            licenseplate=licenseplate,
            make="Toyota",
            model="Yaris",
            color="Blue",
            year=2020,
            created_at=clock(),
        )
        return access_vehicles.add_vehicle(vehicle)
    return _make
