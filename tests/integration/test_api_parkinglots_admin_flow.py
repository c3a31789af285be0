import pytest

pytest.importorskip("httpx")

from api_helpers import create_lot, login


def test_admin_crud_parking_lot(client):
    _, admin = login(client, role="ADMIN")
    lot = create_lot(client, admin, capacity=3)
    assert lot["reserved"] == 0
    assert lot["coordinates"] == [51.917, 4.484]

    r = client.get(f"/parking-lots/{lot['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "IT Lot"

    r = client.put(f"/parking-lots/{lot['id']}", json={"tariff": 3.5}, headers=admin)
    assert r.status_code == 200, r.text
    assert r.json()["tariff"] == 3.5

    r = client.delete(f"/parking-lots/{lot['id']}", headers=admin)
    assert r.status_code == 200

    r = client.get(f"/parking-lots/{lot['id']}")
    assert r.status_code == 404
    assert r.json()["type"] == "NotFoundError"


def test_listing_is_paginated(client):
    _, admin = login(client, role="ADMIN")
    for _ in range(3):
        create_lot(client, admin)

    r = client.get("/parking-lots", params={"page": 2, "page_size": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 3
    assert body["page"] == 2
    assert len(body["items"]) == 1

    assert client.get("/parking-lots", params={"page_size": 500}).status_code == 422


def test_lot_in_use_can_not_shrink_or_be_deleted(client):
    _, admin = login(client, role="ADMIN")
    _, user = login(client)
    lot = create_lot(client, admin, capacity=2)

    r = client.post(f"/parking-lots/{lot['id']}/sessions/start", json={"licenseplate": "USE-01"}, headers=user)
    assert r.status_code == 201, r.text

    r = client.put(f"/parking-lots/{lot['id']}", json={"capacity": 0}, headers=admin)
    assert r.status_code == 400

    r = client.delete(f"/parking-lots/{lot['id']}", headers=admin)
    assert r.status_code == 400
