import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_db_datetime(value: datetime):
    if value is None:
        return None
    return value.strftime(DATETIME_FORMAT)


def from_db_datetime(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.strptime(value, DATETIME_FORMAT)


class DBConnection:

    def __init__(self, database_path):
        # one connection shared by the worker threads, serialized by self.lock
        self.connection = sqlite3.connect(database_path, check_same_thread=False, timeout=5.0)
        self.connection.row_factory = sqlite3.Row
        self.cursor = self.connection.cursor()
        self.lock = threading.RLock()
        self._depth = 0

        self.cursor.execute("PRAGMA foreign_keys = ON")
        self.connection.commit()

        self.create_database_and_tables()


    def create_database_and_tables(self):
        tables_query = """
        CREATE TABLE IF NOT EXISTS parking_lots (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            location TEXT,
            address TEXT,
            capacity INTEGER NOT NULL CHECK (capacity >= 0),
            reserved INTEGER NOT NULL DEFAULT 0,
            tariff REAL NOT NULL,
            daytariff REAL NOT NULL,
            lat REAL,
            lng REAL,
            created_at DATETIME NOT NULL,
            CHECK (reserved >= 0 AND reserved <= capacity)
        );

        CREATE TABLE IF NOT EXISTS capacity_holds (
            id INTEGER PRIMARY KEY,
            parking_lot_id INTEGER NOT NULL,
            holder VARCHAR(255) NOT NULL UNIQUE,
            created_at DATETIME NOT NULL,
            FOREIGN KEY (parking_lot_id) REFERENCES parking_lots(id)
        );

        CREATE TABLE IF NOT EXISTS vehicles(
            id INTEGER PRIMARY KEY,
            user_id INTEGER NOT NULL,
            licenseplate VARCHAR(255) NOT NULL UNIQUE,
            make VARCHAR(255),
            model VARCHAR(255),
            color VARCHAR(255),
            year INTEGER,
            created_at DATETIME NOT NULL
        );

        CREATE TABLE IF NOT EXISTS sessions(
            id INTEGER PRIMARY KEY,
            parking_lot_id INTEGER NOT NULL,
            licenseplate VARCHAR(255) NOT NULL,
            username VARCHAR(255) NOT NULL,
            started DATETIME NOT NULL,
            stopped DATETIME,
            duration_minutes INT NOT NULL DEFAULT 0,
            cost DECIMAL(10,2) NOT NULL DEFAULT 0,
            payment_status VARCHAR(255) NOT NULL,
            reservation_id INTEGER,
            FOREIGN KEY (parking_lot_id) REFERENCES parking_lots(id)
        );

        CREATE INDEX IF NOT EXISTS idx_sessions_licenseplate
            ON sessions (licenseplate, payment_status);

        CREATE TABLE IF NOT EXISTS payments(
            id INTEGER PRIMARY KEY,
            transaction_ref VARCHAR(255) NOT NULL UNIQUE,
            amount DECIMAL(10,2) NOT NULL,
            initiator VARCHAR(255) NOT NULL,
            created_at DATETIME NOT NULL,
            completed DATETIME NOT NULL,
            hash VARCHAR(255) NOT NULL,
            session_id VARCHAR(255),
            parking_lot_id INTEGER
        );

        CREATE TABLE IF NOT EXISTS t_data(
            id INTEGER PRIMARY KEY,
            amount DECIMAL(10,2) NOT NULL,
            date DATETIME NOT NULL,
            method VARCHAR(255) NOT NULL,
            issuer VARCHAR(255) NOT NULL,
            bank VARCHAR(255) NOT NULL,
            FOREIGN KEY (id) REFERENCES payments(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS reservations(
            id INTEGER PRIMARY KEY,
            user_id INTEGER NOT NULL,
            parking_lot_id INTEGER NOT NULL,
            vehicle_id INTEGER NOT NULL,
            start_time DATETIME NOT NULL,
            end_time DATETIME NOT NULL,
            status VARCHAR(255) NOT NULL,
            created_at DATETIME NOT NULL,
            cost DECIMAL(10,2) NOT NULL,
            FOREIGN KEY (parking_lot_id) REFERENCES parking_lots(id)
        );
        """

        with self.lock:
            self.cursor.executescript(tables_query)


    def execute(self, query, params=()):
        with self.lock:
            return self.connection.execute(query, params)


    def fetchone(self, query, params=()):
        with self.lock:
            return self.connection.execute(query, params).fetchone()


    def fetchall(self, query, params=()):
        with self.lock:
            return self.connection.execute(query, params).fetchall()


    def commit(self):
        # inside transaction() the outermost block decides
        with self.lock:
            if self._depth == 0:
                self.connection.commit()


    @contextmanager
    def transaction(self):
        """Run a block of statements as one unit.

        Nested blocks join the outer one. The lock is held for the whole
        block so other threads cannot interleave statements with it.
        """
        with self.lock:
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    self.connection.rollback()
                raise
            else:
                self._depth -= 1
                if self._depth == 0:
                    self.connection.commit()


    def close_connection(self):
        self.cursor.close()
        self.connection.close()
