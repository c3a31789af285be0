import logging
from datetime import datetime
from typing import Optional

from ParkLedger.api.DBConnection import DBConnection
from ParkLedger.api.DataAccess.AccessParkingLots import AccessParkingLots
from ParkLedger.api.DataAccess.AccessReservations import AccessReservations
from ParkLedger.api.DataAccess.AccessVehicles import AccessVehicles
from ParkLedger.api.Models.Reservation import (
    Reservation,
    ACTIVE,
    CANCELLED,
    CONFIRMED,
    RESERVATION_STATUSES,
)
from ParkLedger.api.Services.CapacityTracker import CapacityTracker
from ParkLedger.api.Services.SessionService import SessionService
from ParkLedger.api.errors import NotFoundError, ValidationError
from ParkLedger.api.pagination import DEFAULT_PAGE_SIZE, check_page
from ParkLedger.api import session_calculator as sc

logger = logging.getLogger(__name__)

# Cancelled is terminal; a confirmed reservation has handed its capacity to a session
ALLOWED_TRANSITIONS = {
    ACTIVE: (ACTIVE, CONFIRMED, CANCELLED),
    CONFIRMED: (CONFIRMED, CANCELLED),
    CANCELLED: (CANCELLED,),
}


class ReservationDTO:

    def __init__(self,
                 user_id: int,
                 parking_lot_id: int,
                 vehicle_id: int,
                 start_time: datetime,
                 end_time: datetime,
                 status: Optional[str] = None,
                 cost: Optional[float] = None):

        self.user_id = user_id
        self.parking_lot_id = parking_lot_id
        self.vehicle_id = vehicle_id
        self.start_time = start_time
        self.end_time = end_time
        self.status = status
        self.cost = cost


class ReservationService:

    def __init__(self,
                 conn: DBConnection,
                 tracker: CapacityTracker = None,
                 session_service: SessionService = None,
                 vehicles: AccessVehicles = None,
                 clock=sc.utc_now):
        self.db = conn
        self.clock = clock
        self.tracker = tracker or CapacityTracker(conn, clock=clock)
        self.session_service = session_service or SessionService(conn, tracker=self.tracker, clock=clock)
        self.vehicles = vehicles or AccessVehicles(conn=conn)
        self.access_reservations = AccessReservations(conn=conn)
        self.access_parkinglots = AccessParkingLots(conn=conn)


    def _validate(self, dto: ReservationDTO):
        if dto.start_time is None or dto.end_time is None:
            raise ValidationError("Reservation needs a start and an end time")
        if dto.end_time <= dto.start_time:
            raise ValidationError("Reservation end time must be after its start time")
        if dto.status is not None and dto.status not in RESERVATION_STATUSES:
            raise ValidationError(f"Unknown reservation status {dto.status}")


    def _confirm(self, reservation: Reservation):
        licenseplate = self.vehicles.get_licenseplate(reservation.vehicle_id)
        session = self.session_service.create_from_reservation(
            lot_id=reservation.parking_lot_id,
            licenseplate=licenseplate,
            username=str(reservation.id),
            start=reservation.start_time,
            end=reservation.end_time,
            reservation_id=reservation.id,
        )
        reservation.cost = session.cost
        return session


    def _release_hold(self, reservation: Reservation):
        # a confirmed reservation already handed its hold to the session
        lot_id = self.tracker.holding_lot(reservation.holder)
        if lot_id is not None:
            self.tracker.release(lot_id, reservation.holder)


    def _move_hold(self, reservation: Reservation, new_lot_id, keep: bool):
        if reservation.status == CONFIRMED:
            raise ValidationError(f"Reservation {reservation.id} is confirmed and cannot change lot")
        old_lot_id = self.tracker.holding_lot(reservation.holder)
        if old_lot_id is None:
            return
        self.tracker.release(old_lot_id, reservation.holder)
        if keep:
            self.tracker.try_reserve(new_lot_id, reservation.holder)


    def create(self, dto: ReservationDTO) -> Reservation:
        self._validate(dto)

        with self.db.transaction():
            if self.access_parkinglots.get_parking_lot(id=dto.parking_lot_id) is None:
                raise NotFoundError(f"Parking lot {dto.parking_lot_id} not found")

            reservation = Reservation(
                id=None,
                user_id=dto.user_id,
                parking_lot_id=dto.parking_lot_id,
                vehicle_id=dto.vehicle_id,
                start_time=dto.start_time,
                end_time=dto.end_time,
                status=dto.status or ACTIVE,
                created_at=self.clock(),
                cost=0.0,
            )
            self.access_reservations.add_reservation(reservation)
            self.tracker.try_reserve(dto.parking_lot_id, reservation.holder)

            if reservation.status == CONFIRMED:
                self._confirm(reservation)
                self.access_reservations.update_reservation(reservation)
            elif reservation.status == CANCELLED:
                self._release_hold(reservation)

        logger.info("Created reservation %s on lot %s", reservation.id, reservation.parking_lot_id,
                    extra={"reservation_id": reservation.id, "lot_id": reservation.parking_lot_id})
        return reservation


    def update(self, id, dto: ReservationDTO) -> Reservation:
        self._validate(dto)

        with self.db.transaction():
            reservation = self.access_reservations.get_reservation(id=id)
            if reservation is None:
                raise NotFoundError(f"Reservation {id} not found")
            if self.access_parkinglots.get_parking_lot(id=dto.parking_lot_id) is None:
                raise NotFoundError(f"Parking lot {dto.parking_lot_id} not found")

            previous_status = reservation.status
            new_status = dto.status or previous_status
            if new_status not in ALLOWED_TRANSITIONS[previous_status]:
                raise ValidationError(f"Reservation {id} cannot go from {previous_status} to {new_status}")

            if dto.parking_lot_id != reservation.parking_lot_id:
                self._move_hold(reservation, dto.parking_lot_id, keep=new_status != CANCELLED)

            reservation.user_id = dto.user_id
            reservation.parking_lot_id = dto.parking_lot_id
            reservation.vehicle_id = dto.vehicle_id
            reservation.start_time = dto.start_time
            reservation.end_time = dto.end_time
            if dto.cost is not None:
                reservation.cost = dto.cost
            reservation.status = new_status

            if new_status == CONFIRMED and previous_status != CONFIRMED:
                self._confirm(reservation)
            elif new_status == CANCELLED and previous_status != CANCELLED:
                self._release_hold(reservation)

            self.access_reservations.update_reservation(reservation)

        logger.info("Updated reservation %s (%s -> %s)", reservation.id, previous_status, new_status,
                    extra={"reservation_id": reservation.id})
        return reservation


    def delete(self, id) -> bool:
        with self.db.transaction():
            reservation = self.access_reservations.get_reservation(id=id)
            if reservation is None:
                raise NotFoundError(f"Reservation {id} not found")
            self._release_hold(reservation)
            self.access_reservations.delete_reservation(reservation)

        logger.info("Deleted reservation %s", id, extra={"reservation_id": id})
        return True


    def get(self, id) -> Reservation:
        reservation = self.access_reservations.get_reservation(id=id)
        if reservation is None:
            raise NotFoundError(f"Reservation {id} not found")
        return reservation


    def get_all(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE):
        offset = check_page(page, page_size)
        reservations = self.access_reservations.get_reservations(limit=page_size, offset=offset)
        return reservations, self.access_reservations.count_reservations()


    def get_by_user(self, user_id) -> list[Reservation]:
        return self.access_reservations.get_reservations_by_userid(user_id)
