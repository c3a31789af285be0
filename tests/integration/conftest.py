import pytest

from ParkLedger.api.DBConnection import DBConnection


@pytest.fixture()
def client(tmp_path):
    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient
    from ParkLedger.api.app import create_app

    connection = DBConnection(str(tmp_path / "api.db"))
    c = TestClient(create_app(connection=connection))
    try:
        yield c
    finally:
        connection.close_connection()
