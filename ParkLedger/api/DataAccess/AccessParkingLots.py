from ParkLedger.api.DBConnection import DBConnection, from_db_datetime, to_db_datetime
from ParkLedger.api.Models.ParkingLot import ParkingLot
from ParkLedger.api.Models.ParkingLotCoordinates import ParkingLotCoordinates

class AccessParkingLots:

    def __init__(self, conn: DBConnection):
        self.db = conn


    def _to_parking_lot(self, row):
        row_dict = dict(row)
        return ParkingLot(
            id=row_dict["id"],
            name=row_dict.get("name", ""),
            location=row_dict.get("location") or "",
            address=row_dict.get("address") or "",
            capacity=row_dict.get("capacity", 0),
            reserved=row_dict.get("reserved", 0),
            tariff=float(row_dict.get("tariff") or 0.0),
            daytariff=float(row_dict.get("daytariff") or 0.0),
            coordinates=ParkingLotCoordinates(
                lat=float(row_dict.get("lat") or 0.0),
                lng=float(row_dict.get("lng") or 0.0),
            ),
            created_at=from_db_datetime(row_dict.get("created_at")),
        )


    def get_parking_lots(self, limit: int, offset: int = 0) -> list[ParkingLot]:
        query = """
        SELECT * FROM parking_lots
        ORDER BY id
        LIMIT ? OFFSET ?;
        """
        rows = self.db.fetchall(query, [limit, offset])
        return [self._to_parking_lot(row) for row in rows]


    def count_parking_lots(self) -> int:
        row = self.db.fetchone("SELECT COUNT(*) AS total FROM parking_lots;")
        return row["total"]


    def get_parking_lot(self, id):
        query = """
        SELECT * FROM parking_lots
        WHERE id = ?;
        """
        row = self.db.fetchone(query, [id])
        if row is None:
            return None
        return self._to_parking_lot(row)


    def add_parking_lot(self, parkinglot: ParkingLot):
        query = """
        INSERT INTO parking_lots
            (name, location, address, capacity, reserved, tariff, daytariff, lat, lng, created_at)
        VALUES
            (:name, :location, :address, :capacity, :reserved, :tariff, :daytariff, :lat, :lng, :created_at);
        """
        coordinates = parkinglot.coordinates or ParkingLotCoordinates()
        payload = {
            "name": parkinglot.name,
            "location": parkinglot.location,
            "address": parkinglot.address,
            "capacity": parkinglot.capacity,
            "reserved": parkinglot.reserved or 0,
            "tariff": parkinglot.tariff,
            "daytariff": parkinglot.daytariff,
            "lat": coordinates.lat,
            "lng": coordinates.lng,
            "created_at": to_db_datetime(parkinglot.created_at),
        }
        cursor = self.db.execute(query, payload)
        parkinglot.id = cursor.lastrowid
        self.db.commit()
        return parkinglot


    def update_parking_lot(self, parkinglot: ParkingLot):
        # reserved is owned by the capacity tracker and never written here
        query = """
        UPDATE parking_lots
        SET name = :name,
            location = :location,
            address = :address,
            capacity = :capacity,
            tariff = :tariff,
            daytariff = :daytariff,
            lat = :lat,
            lng = :lng
        WHERE id = :id;
        """
        coordinates = parkinglot.coordinates or ParkingLotCoordinates()
        payload = {
            "id": parkinglot.id,
            "name": parkinglot.name,
            "location": parkinglot.location,
            "address": parkinglot.address,
            "capacity": parkinglot.capacity,
            "tariff": parkinglot.tariff,
            "daytariff": parkinglot.daytariff,
            "lat": coordinates.lat,
            "lng": coordinates.lng,
        }
        self.db.execute(query, payload)
        self.db.commit()


    def delete_parking_lot(self, parkinglot: ParkingLot):
        query = """
        DELETE FROM parking_lots
        WHERE id = ?;
        """
        self.db.execute(query, [parkinglot.id])
        self.db.commit()


    def increment_reserved(self, id) -> bool:
        """Compare-and-increment; False when the lot is already full."""
        query = """
        UPDATE parking_lots
        SET reserved = reserved + 1
        WHERE id = ?
        AND reserved < capacity;
        """
        cursor = self.db.execute(query, [id])
        return cursor.rowcount == 1


    def decrement_reserved(self, id) -> bool:
        query = """
        UPDATE parking_lots
        SET reserved = reserved - 1
        WHERE id = ?
        AND reserved > 0;
        """
        cursor = self.db.execute(query, [id])
        return cursor.rowcount == 1
