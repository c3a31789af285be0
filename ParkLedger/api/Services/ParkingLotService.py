import logging
import sqlite3

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessParkingLots import AccessParkingLots
from ParkLedger.api.Models.ParkingLot import ParkingLot
from ParkLedger.api.Models.ParkingLotCoordinates import ParkingLotCoordinates
from ParkLedger.api.errors import NotFoundError, ValidationError
from ParkLedger.api.pagination import DEFAULT_PAGE_SIZE, check_page
from ParkLedger.api import session_calculator as sc

logger = logging.getLogger(__name__)


class ParkingLotService:

    def __init__(self, conn: DBConnection, clock=sc.utc_now):
        self.db = conn
        self.clock = clock
        self.access_parkinglots = AccessParkingLots(conn=conn)


    def _check_values(self, capacity, tariff, daytariff):
        if capacity is None or capacity < 0:
            raise ValidationError("capacity must be 0 or more")
        if tariff is None or tariff < 0 or daytariff is None or daytariff < 0:
            raise ValidationError("tariffs cannot be negative")


    def create(self, name: str, location: str, address: str, capacity: int,
               tariff: float, daytariff: float, coordinates=None) -> ParkingLot:
        self._check_values(capacity, tariff, daytariff)
        lat, lng = (coordinates or [0.0, 0.0])[:2]
        parking_lot = ParkingLot(
            id=None,
            name=name,
            location=location,
            address=address,
            capacity=capacity,
            reserved=0,
            tariff=tariff,
            daytariff=daytariff,
            coordinates=ParkingLotCoordinates(lat=lat, lng=lng),
            created_at=self.clock(),
        )
        self.access_parkinglots.add_parking_lot(parking_lot)
        logger.info("Created parking lot %s", parking_lot.id, extra={"lot_id": parking_lot.id})
        return parking_lot


    def get(self, lot_id) -> ParkingLot:
        parking_lot = self.access_parkinglots.get_parking_lot(id=lot_id)
        if parking_lot is None:
            raise NotFoundError(f"Parking lot {lot_id} not found")
        return parking_lot


    def get_all(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE):
        offset = check_page(page, page_size)
        lots = self.access_parkinglots.get_parking_lots(limit=page_size, offset=offset)
        return lots, self.access_parkinglots.count_parking_lots()


    def update(self, lot_id, **changes) -> ParkingLot:
        with self.db.transaction():
            parking_lot = self.get(lot_id)
            for field in ("name", "location", "address", "capacity", "tariff", "daytariff"):
                if changes.get(field) is not None:
                    setattr(parking_lot, field, changes[field])
            if changes.get("coordinates") is not None:
                lat, lng = changes["coordinates"][:2]
                parking_lot.coordinates = ParkingLotCoordinates(lat=lat, lng=lng)

            self._check_values(parking_lot.capacity, parking_lot.tariff, parking_lot.daytariff)
            if parking_lot.capacity < parking_lot.reserved:
                raise ValidationError(
                    f"capacity {parking_lot.capacity} is below the {parking_lot.reserved} places in use"
                )
            self.access_parkinglots.update_parking_lot(parking_lot)
        logger.info("Updated parking lot %s", lot_id, extra={"lot_id": lot_id})
        return parking_lot


    def delete(self, lot_id):
        try:
            with self.db.transaction():
                parking_lot = self.get(lot_id)
                if parking_lot.reserved > 0:
                    raise ValidationError(f"Parking lot {lot_id} still has {parking_lot.reserved} places in use")
                self.access_parkinglots.delete_parking_lot(parking_lot)
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Parking lot {lot_id} still has sessions or reservations") from e
        logger.info("Deleted parking lot %s", lot_id, extra={"lot_id": lot_id})
