import sqlite3
from ParkLedger.api.DBConnection import DBConnection, from_db_datetime, to_db_datetime
from ParkLedger.api.Models.Vehicle import Vehicle
from ParkLedger.api.errors import NotFoundError, ValidationError

class AccessVehicles:
    """Vehicle registry: resolves vehicle ids to license plates."""

    def __init__(self, conn: DBConnection):
        self.db = conn


    def get_vehicle(self, id):
        query = """
        SELECT * FROM vehicles
        WHERE id = ?;
        """
        row = self.db.fetchone(query, [id])
        if row is None:
            return None
        vehicle_dict = dict(row)
        vehicle_dict["created_at"] = from_db_datetime(vehicle_dict["created_at"])
        return Vehicle(**vehicle_dict)


    def get_licenseplate(self, vehicle_id) -> str:
        vehicle = self.get_vehicle(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle.licenseplate


    def add_vehicle(self, vehicle: Vehicle):
        query = """
        INSERT INTO vehicles
            (user_id, licenseplate, make, model, color, year, created_at)
        VALUES
            (:user_id, :licenseplate, :make, :model, :color, :year, :created_at);
        """
        payload = {
            "user_id": vehicle.user_id,
            "licenseplate": vehicle.licenseplate,
            "make": vehicle.make,
            "model": vehicle.model,
            "color": vehicle.color,
            "year": vehicle.year,
            "created_at": to_db_datetime(vehicle.created_at),
        }
        try:
            with self.db.transaction():
                cursor = self.db.execute(query, payload)
                vehicle.id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            raise ValidationError(f"Vehicle {vehicle.licenseplate} already registered") from e
        return vehicle

