import pytest

from ParkLedger.api.Services import CapacityTracker, ParkingLotService
from ParkLedger.api.errors import NotFoundError, ValidationError


def test_create_get_update(conn, clock, make_lot):
    service = ParkingLotService(conn, clock=clock)
    lot = make_lot(capacity=50, tariff=2.5, daytariff=12.0)

    fetched = service.get(lot.id)
    assert fetched.name == "Test Lot"
    assert fetched.reserved == 0
    assert fetched.coordinates.to_list() == [51.917, 4.484]

    updated = service.update(lot.id, name="Renamed", tariff=3.0, reserved=40)
    assert updated.name == "Renamed"
    assert service.get(lot.id).tariff == 3.0
    # reserved is owned by the capacity tracker
    assert service.get(lot.id).reserved == 0


def test_capacity_cannot_drop_below_reserved(conn, clock, make_lot):
    service = ParkingLotService(conn, clock=clock)
    tracker = CapacityTracker(conn, clock=clock)
    lot = make_lot(capacity=3)
    tracker.try_reserve(lot.id, "session:1")
    tracker.try_reserve(lot.id, "session:2")

    with pytest.raises(ValidationError):
        service.update(lot.id, capacity=1)

    assert service.update(lot.id, capacity=2).capacity == 2
    assert service.get(lot.id).is_full


def test_negative_values_rejected(conn, clock, make_lot):
    service = ParkingLotService(conn, clock=clock)
    with pytest.raises(ValidationError):
        make_lot(capacity=-1)

    lot = make_lot()
    with pytest.raises(ValidationError):
        service.update(lot.id, tariff=-2.0)


def test_delete_only_when_empty(conn, clock, make_lot):
    service = ParkingLotService(conn, clock=clock)
    tracker = CapacityTracker(conn, clock=clock)
    lot = make_lot(capacity=1)
    tracker.try_reserve(lot.id, "session:1")

    with pytest.raises(ValidationError):
        service.delete(lot.id)

    tracker.release(lot.id, "session:1")
    service.delete(lot.id)
    with pytest.raises(NotFoundError):
        service.get(lot.id)


def test_listing_is_paginated(conn, clock, make_lot):
    service = ParkingLotService(conn, clock=clock)
    for n in range(5):
        make_lot(name=f"Lot {n}")

    items, total = service.get_all(page=1, page_size=2)
    assert total == 5
    assert [lot.name for lot in items] == ["Lot 0", "Lot 1"]

    items, _ = service.get_all(page=3, page_size=2)
    assert [lot.name for lot in items] == ["Lot 4"]

    with pytest.raises(ValidationError):
        service.get_all(page_size=101)
