from ParkLedger.api.DBConnection import DBConnection, from_db_datetime, to_db_datetime
from ParkLedger.api.Models.Session import Session, PENDING

class AccessSessions:

    def __init__(self, conn: DBConnection):
        self.db = conn


    def _to_session(self, row):
        session_dict = dict(row)
        session_dict["started"] = from_db_datetime(session_dict["started"])
        session_dict["stopped"] = from_db_datetime(session_dict.get("stopped"))
        if session_dict.get("cost") is None:
            session_dict["cost"] = 0.0
        session_dict["cost"] = float(session_dict["cost"])
        return Session(**session_dict)


    def _payload(self, session: Session):
        return {
            "id": session.id,
            "parking_lot_id": session.parking_lot_id,
            "licenseplate": session.licenseplate,
            "username": session.username,
            "started": to_db_datetime(session.started),
            "stopped": to_db_datetime(session.stopped),
            "duration_minutes": session.duration_minutes or 0,
            "cost": session.cost or 0.0,
            "payment_status": session.payment_status,
            "reservation_id": session.reservation_id,
        }


    def get_session(self, id):
        query = """
        SELECT * FROM sessions
        WHERE id = ?;
        """
        row = self.db.fetchone(query, [id])
        if row is None:
            return None
        return self._to_session(row)


    def get_session_byreservation(self, reservation_id):
        query = """
        SELECT * FROM sessions
        WHERE reservation_id = ?
        ORDER BY id
        LIMIT 1;
        """
        row = self.db.fetchone(query, [reservation_id])
        if row is None:
            return None
        return self._to_session(row)


    def get_sessions_byuser(self, username: str) -> list[Session]:
        query = """
        SELECT * FROM sessions
        WHERE username = ?
        ORDER BY started, id;
        """
        return [self._to_session(row) for row in self.db.fetchall(query, [username])]


    def get_active_sessions(self) -> list[Session]:
        query = """
        SELECT * FROM sessions
        WHERE stopped IS NULL
        ORDER BY started, id;
        """
        return [self._to_session(row) for row in self.db.fetchall(query)]


    def get_active_session_bylicenseplate(self, licenseplate: str):
        query = """
        SELECT * FROM sessions
        WHERE licenseplate = ?
        AND stopped IS NULL
        ORDER BY started, id
        LIMIT 1;
        """
        row = self.db.fetchone(query, [licenseplate])
        if row is None:
            return None
        return self._to_session(row)


    def get_pending_sessions_bylicenseplate(self, licenseplate: str) -> list[Session]:
        # only stopped sessions have a final cost and can be paid
        query = """
        SELECT * FROM sessions
        WHERE payment_status = ?
        AND licenseplate = ?
        AND stopped IS NOT NULL
        ORDER BY started, id;
        """
        rows = self.db.fetchall(query, [PENDING, licenseplate])
        return [self._to_session(row) for row in rows]


    def get_pending_session(self, id, licenseplate: str):
        query = """
        SELECT * FROM sessions
        WHERE id = ?
        AND licenseplate = ?
        AND payment_status = ?
        AND stopped IS NOT NULL;
        """
        row = self.db.fetchone(query, [id, licenseplate, PENDING])
        if row is None:
            return None
        return self._to_session(row)


    def add_session(self, session: Session):
        query = """
        INSERT INTO sessions
            (parking_lot_id, licenseplate, username, started, stopped, duration_minutes, cost, payment_status, reservation_id)
        VALUES
            (:parking_lot_id, :licenseplate, :username, :started, :stopped, :duration_minutes, :cost, :payment_status, :reservation_id);
        """
        cursor = self.db.execute(query, self._payload(session))
        session.id = cursor.lastrowid
        self.db.commit()
        return session


    def stop_session(self, session: Session) -> bool:
        """Write stop time, duration and cost once; False if already stopped."""
        query = """
        UPDATE sessions
        SET stopped = :stopped,
            duration_minutes = :duration_minutes,
            cost = :cost
        WHERE id = :id
        AND stopped IS NULL;
        """
        cursor = self.db.execute(query, self._payload(session))
        self.db.commit()
        return cursor.rowcount == 1


    def set_payment_status(self, ids, payment_status: str, expected_status: str = PENDING) -> int:
        ids = list(ids)
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        query = f"""
        UPDATE sessions
        SET payment_status = ?
        WHERE payment_status = ?
        AND id IN ({placeholders});
        """
        cursor = self.db.execute(query, [payment_status, expected_status, *ids])
        self.db.commit()
        return cursor.rowcount
