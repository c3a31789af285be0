"""Parking session lifecycle: Active (no stop time) -> Stopped (terminal)."""
import logging
from datetime import datetime
from typing import Optional

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessParkingLots import AccessParkingLots
from ParkLedger.api.DataAccess.AccessSessions import AccessSessions
from ParkLedger.api.Models.Session import Session, PENDING
from ParkLedger.api.Services.CapacityTracker import CapacityTracker
from ParkLedger.api.errors import (
    ActiveSessionExistsError,
    AlreadyStoppedError,
    NotFoundError,
    ValidationError,
)
from ParkLedger.api import session_calculator as sc

logger = logging.getLogger(__name__)


def session_holder(session_id) -> str:
    return f"session:{session_id}"


class SessionService:

    def __init__(self, conn: DBConnection, tracker: CapacityTracker = None, clock=sc.utc_now):
        self.db = conn
        self.clock = clock
        self.tracker = tracker or CapacityTracker(conn, clock=clock)
        self.access_sessions = AccessSessions(conn=conn)
        self.access_parkinglots = AccessParkingLots(conn=conn)


    def _require_lot(self, lot_id):
        parking_lot = self.access_parkinglots.get_parking_lot(id=lot_id)
        if parking_lot is None:
            raise NotFoundError(f"Parking lot {lot_id} not found")
        return parking_lot


    def start_session(self, lot_id, licenseplate: str, username: str) -> Session:
        if not licenseplate:
            raise ValidationError("License plate is required")

        with self.db.transaction():
            self._require_lot(lot_id)
            if self.access_sessions.get_active_session_bylicenseplate(licenseplate) is not None:
                raise ActiveSessionExistsError(f"Active session already exists for {licenseplate}")

            session = Session(
                id=None,
                parking_lot_id=lot_id,
                licenseplate=licenseplate,
                username=username,
                started=self.clock(),
                stopped=None,
                duration_minutes=0,
                cost=0.0,
                payment_status=PENDING,
            )
            self.access_sessions.add_session(session)
            # LotFullError here rolls the insert back
            self.tracker.try_reserve(lot_id, session_holder(session.id))

        logger.info("Started session %s for %s on lot %s", session.id, licenseplate, lot_id,
                    extra={"session_id": session.id, "lot_id": lot_id, "licenseplate": licenseplate})
        return session


    def stop_session(self, session_id) -> Session:
        with self.db.transaction():
            session = self.access_sessions.get_session(id=session_id)
            if session is None:
                raise NotFoundError(f"Session {session_id} not found")
            if not session.is_active:
                raise AlreadyStoppedError(f"Session {session_id} is already stopped")

            parking_lot = self._require_lot(session.parking_lot_id)
            session.stopped = max(self.clock(), session.started)
            session.cost, session.duration_minutes = sc.calculate_price(
                parking_lot, session.started, session.stopped
            )
            if not self.access_sessions.stop_session(session):
                raise AlreadyStoppedError(f"Session {session_id} is already stopped")
            self.tracker.release(session.parking_lot_id, session_holder(session.id))

        logger.info("Stopped session %s after %s minutes, cost %.2f", session.id,
                    session.duration_minutes, session.cost,
                    extra={"session_id": session.id, "amount": session.cost})
        return session


    def create_from_reservation(self,
                                lot_id,
                                licenseplate: str,
                                username: str,
                                start: datetime,
                                end: datetime,
                                reservation_id: Optional[int] = None) -> Session:
        """Record a confirmed reservation as an already stopped session.

        No new capacity is claimed. The reservation's hold is moved onto the
        session and then released, since the session is over the moment it
        is created.
        """
        if end < start:
            raise ValidationError("Reservation end lies before its start")

        with self.db.transaction():
            if reservation_id is not None and \
                    self.access_sessions.get_session_byreservation(reservation_id) is not None:
                raise ValidationError(f"Reservation {reservation_id} already has a session")
            parking_lot = self._require_lot(lot_id)
            cost, minutes = sc.calculate_price(parking_lot, start, end)
            session = Session(
                id=None,
                parking_lot_id=lot_id,
                licenseplate=licenseplate,
                username=username,
                started=start,
                stopped=end,
                duration_minutes=minutes,
                cost=cost,
                payment_status=PENDING,
                reservation_id=reservation_id,
            )
            self.access_sessions.add_session(session)

            reservation_holder = f"reservation:{reservation_id}" if reservation_id is not None else None
            if reservation_holder and self.tracker.is_holding(reservation_holder):
                held_lot = self.tracker.holding_lot(reservation_holder)
                self.tracker.transfer(reservation_holder, session_holder(session.id))
                self.tracker.release(held_lot, session_holder(session.id))
            else:
                logger.warning("Reservation %s holds no capacity, nothing to hand over", reservation_id,
                               extra={"reservation_id": reservation_id})

        logger.info("Created session %s from reservation %s", session.id, reservation_id,
                    extra={"session_id": session.id, "reservation_id": reservation_id})
        return session


    def get_session(self, session_id) -> Session:
        session = self.access_sessions.get_session(id=session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session


    def get_active_sessions(self) -> list[Session]:
        return self.access_sessions.get_active_sessions()


    def get_sessions_by_user(self, username: str) -> list[Session]:
        return self.access_sessions.get_sessions_byuser(username)
