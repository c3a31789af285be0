from datetime import datetime
from ParkLedger.api.DBConnection import DBConnection, to_db_datetime

class AccessCapacityHolds:

    def __init__(self, conn: DBConnection):
        self.db = conn


    def get_hold(self, holder: str):
        query = """
        SELECT * FROM capacity_holds
        WHERE holder = ?;
        """
        row = self.db.fetchone(query, [holder])
        return dict(row) if row is not None else None


    def get_holds_by_parking_lot(self, parking_lot_id) -> list[dict]:
        query = """
        SELECT * FROM capacity_holds
        WHERE parking_lot_id = ?
        ORDER BY id;
        """
        return [dict(row) for row in self.db.fetchall(query, [parking_lot_id])]


    def add_hold(self, parking_lot_id, holder: str, created_at: datetime):
        query = """
        INSERT INTO capacity_holds
            (parking_lot_id, holder, created_at)
        VALUES
            (?, ?, ?);
        """
        self.db.execute(query, [parking_lot_id, holder, to_db_datetime(created_at)])


    def delete_hold(self, holder: str) -> bool:
        query = """
        DELETE FROM capacity_holds
        WHERE holder = ?;
        """
        cursor = self.db.execute(query, [holder])
        return cursor.rowcount == 1


    def rekey_hold(self, old_holder: str, new_holder: str) -> bool:
        query = """
        UPDATE capacity_holds
        SET holder = ?
        WHERE holder = ?;
        """
        cursor = self.db.execute(query, [new_holder, old_holder])
        return cursor.rowcount == 1
