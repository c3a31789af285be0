"""Occupancy bookkeeping for parking lots.

Every unit of ``parking_lots.reserved`` is backed by one row in
``capacity_holds`` keyed by its holder (``reservation:<id>`` or
``session:<id>``). Reserving inserts the hold and bumps the counter in the
same transaction; releasing removes both. A release for a holder without a
hold is a double release and is rejected.
"""
import logging
import sqlite3

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessCapacityHolds import AccessCapacityHolds
from ParkLedger.api.DataAccess.AccessParkingLots import AccessParkingLots
from ParkLedger.api.errors import DoubleReleaseError, LotFullError, NotFoundError, ValidationError
from ParkLedger.api.session_calculator import utc_now

logger = logging.getLogger(__name__)


class CapacityTracker:

    def __init__(self, conn: DBConnection, clock=utc_now):
        self.db = conn
        self.clock = clock
        self.access_parkinglots = AccessParkingLots(conn=conn)
        self.access_holds = AccessCapacityHolds(conn=conn)


    def _require_lot(self, lot_id):
        parking_lot = self.access_parkinglots.get_parking_lot(id=lot_id)
        if parking_lot is None:
            raise NotFoundError(f"Parking lot {lot_id} not found")
        return parking_lot


    def _increment(self, lot_id) -> bool:
        try:
            return self.access_parkinglots.increment_reserved(id=lot_id)
        except sqlite3.OperationalError as e:
            # another writer holds the database; one retry, then give up
            logger.warning("Capacity conflict on lot %s, retrying once: %s", lot_id, e,
                           extra={"lot_id": lot_id})
            try:
                return self.access_parkinglots.increment_reserved(id=lot_id)
            except sqlite3.OperationalError:
                return False


    def try_reserve(self, lot_id, holder: str) -> bool:
        with self.db.transaction():
            self._require_lot(lot_id)
            if self.access_holds.get_hold(holder) is not None:
                raise ValidationError(f"{holder} already holds capacity")
            if not self._increment(lot_id):
                logger.warning("Parking lot %s is full", lot_id, extra={"lot_id": lot_id})
                raise LotFullError(f"Parking lot {lot_id} is full")
            self.access_holds.add_hold(lot_id, holder, self.clock())
        logger.info("Reserved capacity on lot %s for %s", lot_id, holder, extra={"lot_id": lot_id})
        return True


    def release(self, lot_id, holder: str):
        with self.db.transaction():
            self._require_lot(lot_id)
            hold = self.access_holds.get_hold(holder)
            if hold is None or str(hold["parking_lot_id"]) != str(lot_id):
                raise DoubleReleaseError(f"{holder} holds no capacity on lot {lot_id}")
            self.access_holds.delete_hold(holder)
            if not self.access_parkinglots.decrement_reserved(id=lot_id):
                # counter already at 0; clamp instead of going negative
                logger.warning("Reserved counter of lot %s already at 0", lot_id,
                               extra={"lot_id": lot_id})
        logger.info("Released capacity on lot %s for %s", lot_id, holder, extra={"lot_id": lot_id})


    def transfer(self, old_holder: str, new_holder: str):
        """Hand a hold over to another holder without freeing the slot."""
        with self.db.transaction():
            if not self.access_holds.rekey_hold(old_holder, new_holder):
                raise DoubleReleaseError(f"{old_holder} holds no capacity")
        logger.info("Transferred capacity hold %s -> %s", old_holder, new_holder)


    def is_holding(self, holder: str) -> bool:
        return self.access_holds.get_hold(holder) is not None


    def holding_lot(self, holder: str):
        hold = self.access_holds.get_hold(holder)
        return hold["parking_lot_id"] if hold else None


    def available(self, lot_id) -> int:
        return self._require_lot(lot_id).available


    def holders(self, lot_id) -> list[str]:
        return [hold["holder"] for hold in self.access_holds.get_holds_by_parking_lot(lot_id)]
