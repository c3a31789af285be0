import pytest

pytest.importorskip("httpx")

from api_helpers import create_lot, login


def _park(client, lot, headers, licenseplate):
    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": licenseplate}, headers=headers)
    assert r.status_code == 201, r.text
    r = client.post(f"/sessions/{r.json()['id']}/stop", headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_billing_requires_auth(client):
    assert client.get("/billing").status_code == 401


def test_pay_and_bill(client):
    _, admin = login(client, role="ADMIN")
    username, user = login(client)
    other_name, other = login(client)
    lot = create_lot(client, admin, capacity=5)

    _park(client, lot, user, "BILL-01")
    _park(client, lot, user, "BILL-01")

    r = client.get("/payments/unpaid/BILL-01", headers=user)
    assert len(r.json()) == 2

    r = client.post("/payments", json={"licenseplate": "BILL-01"}, headers=user)
    assert r.status_code == 201, r.text
    payment = r.json()
    assert payment["initiator"] == username
    assert payment["session_id"] == "BILL-01"

    r = client.post("/payments", json={"licenseplate": "BILL-01"}, headers=user)
    assert r.status_code == 404
    assert r.json()["type"] == "NoUnpaidSessionsError"

    r = client.get(f"/billing/{username}", headers=user)
    assert r.status_code == 200
    assert r.json()["user"] == username
    assert len(r.json()["payments"]) == 1

    assert client.get(f"/billing/{username}", headers=other).status_code == 403
    assert client.get(f"/billing/{other_name}", headers=other).status_code == 404
    assert client.get(f"/billing/{username}", headers=admin).status_code == 200

    r = client.get("/billing", headers=admin)
    assert [b["user"] for b in r.json()] == [username]


def test_pay_single_session_and_delete_payment(client):
    _, admin = login(client, role="ADMIN")
    username, user = login(client)
    lot = create_lot(client, admin)
    session = _park(client, lot, user, "ONE-01")

    body = {"session_id": session["id"], "licenseplate": "ONE-01", "method": "ideal", "bank": "ING"}
    r = client.post("/payments/session", json=body, headers=user)
    assert r.status_code == 201, r.text
    pid = r.json()["id"]

    assert client.post("/payments/session", json=body, headers=user).status_code == 404
    assert client.get(f"/payments/{pid}", headers=user).status_code == 200
    assert client.get(f"/payments/initiator/{username}", headers=user).json()[0]["id"] == pid

    assert client.delete(f"/payments/{pid}", headers=user).status_code == 403
    assert client.delete(f"/payments/{pid}", headers=admin).status_code == 200
    assert client.delete(f"/payments/{pid}", headers=admin).status_code == 404
    assert client.get(f"/payments/{pid}", headers=admin).status_code == 404
