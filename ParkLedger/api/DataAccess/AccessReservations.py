from ParkLedger.api.DBConnection import DBConnection, from_db_datetime, to_db_datetime
from ParkLedger.api.Models.Reservation import Reservation

class AccessReservations:

    def __init__(self, conn: DBConnection):
        self.db = conn


    def _to_reservation(self, row):
        reservation_dict = dict(row)
        reservation_dict["start_time"] = from_db_datetime(reservation_dict["start_time"])
        reservation_dict["end_time"] = from_db_datetime(reservation_dict["end_time"])
        reservation_dict["created_at"] = from_db_datetime(reservation_dict["created_at"])
        reservation_dict["cost"] = float(reservation_dict.get("cost") or 0.0)
        return Reservation(**reservation_dict)


    def _payload(self, reservation: Reservation):
        return {
            "id": reservation.id,
            "user_id": reservation.user_id,
            "parking_lot_id": reservation.parking_lot_id,
            "vehicle_id": reservation.vehicle_id,
            "start_time": to_db_datetime(reservation.start_time),
            "end_time": to_db_datetime(reservation.end_time),
            "status": reservation.status,
            "created_at": to_db_datetime(reservation.created_at),
            "cost": reservation.cost or 0.0,
        }


    def get_reservation(self, id):
        query = """
        SELECT * FROM reservations
        WHERE id = ?;
        """
        row = self.db.fetchone(query, [id])
        if row is None:
            return None
        return self._to_reservation(row)


    def get_reservations(self, limit: int, offset: int = 0) -> list[Reservation]:
        query = """
        SELECT * FROM reservations
        ORDER BY created_at DESC, id DESC
        LIMIT ? OFFSET ?;
        """
        return [self._to_reservation(row) for row in self.db.fetchall(query, [limit, offset])]


    def count_reservations(self) -> int:
        row = self.db.fetchone("SELECT COUNT(*) AS total FROM reservations;")
        return row["total"]


    def get_reservations_by_userid(self, user_id: int) -> list[Reservation]:
        query = """
        SELECT * FROM reservations
        WHERE user_id = ?
        ORDER BY start_time, id;
        """
        return [self._to_reservation(row) for row in self.db.fetchall(query, [user_id])]


    def add_reservation(self, reservation: Reservation):
        query = """
        INSERT INTO reservations
            (user_id, parking_lot_id, vehicle_id, start_time, end_time, status, created_at, cost)
        VALUES
            (:user_id, :parking_lot_id, :vehicle_id, :start_time, :end_time, :status, :created_at, :cost);
        """
        cursor = self.db.execute(query, self._payload(reservation))
        reservation.id = cursor.lastrowid
        self.db.commit()
        return reservation


    def update_reservation(self, reservation: Reservation):
        query = """
        UPDATE reservations
        SET user_id = :user_id,
            parking_lot_id = :parking_lot_id,
            vehicle_id = :vehicle_id,
            start_time = :start_time,
            end_time = :end_time,
            status = :status,
            created_at = :created_at,
            cost = :cost
        WHERE id = :id;
        """
        self.db.execute(query, self._payload(reservation))
        self.db.commit()


    def delete_reservation(self, reservation: Reservation):
        query = """
        DELETE FROM reservations
        WHERE id = ?;
        """
        self.db.execute(query, [reservation.id])
        self.db.commit()
