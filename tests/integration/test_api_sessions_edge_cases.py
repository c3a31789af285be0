import pytest

pytest.importorskip("httpx")

from api_helpers import create_lot, login


def test_start_stop_session(client):
    _, admin = login(client, role="ADMIN")
    username, user = login(client)
    lot = create_lot(client, admin, capacity=1)

    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "SES-01"}, headers=user)
    assert r.status_code == 201, r.text
    session = r.json()
    assert session["username"] == username
    assert session["stopped"] is None

    assert client.get(f"/parking-lots/{lot['id']}").json()["reserved"] == 1

    r = client.get("/sessions/active", headers=admin)
    assert [s["id"] for s in r.json()] == [session["id"]]

    r = client.post(f"/sessions/{session['id']}/stop", headers=user)
    assert r.status_code == 200, r.text
    assert r.json()["stopped"] is not None
    assert client.get(f"/parking-lots/{lot['id']}").json()["reserved"] == 0

    r = client.post(f"/sessions/{session['id']}/stop", headers=user)
    assert r.status_code == 409
    assert r.json()["type"] == "AlreadyStoppedError"

    r = client.get(f"/sessions/user/{username}", headers=user)
    assert len(r.json()) == 1


def test_full_lot_returns_conflict(client):
    _, admin = login(client, role="ADMIN")
    _, user = login(client)
    lot = create_lot(client, admin, capacity=1)

    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "F-01"}, headers=user)
    assert r.status_code == 201
    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "F-02"}, headers=user)
    assert r.status_code == 409
    assert r.json()["type"] == "LotFullError"


def test_duplicate_active_plate(client):
    _, admin = login(client, role="ADMIN")
    _, user = login(client)
    lot = create_lot(client, admin, capacity=5)

    client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "DUP-01"}, headers=user)
    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "DUP-01"}, headers=user)
    assert r.status_code == 409
    assert r.json()["type"] == "ActiveSessionExistsError"


def test_other_user_can_not_stop_session(client):
    _, admin = login(client, role="ADMIN")
    _, owner = login(client)
    _, stranger = login(client)
    lot = create_lot(client, admin)

    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "OWN-01"}, headers=owner)
    sid = r.json()["id"]

    assert client.post(f"/sessions/{sid}/stop", headers=stranger).status_code == 403
    assert client.post(f"/sessions/{sid}/stop", headers=admin).status_code == 200


def test_unknown_session(client):
    _, user = login(client)
    assert client.post("/sessions/9999/stop", headers=user).status_code == 404
