from sqlmodel import select

from barberbook.models import Booking

from conftest import CLOSED_DAY, DAY, PASSWORD


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# ---------- users ----------

def test_register_login_and_profile(client):
    response = client.post("/api/users/register", json={
        "name": "New Customer",
        "email": "New@Test.com",
        "password": "longenough",
        "phone": "0911",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "new@test.com"
    assert body["user"]["role"] == "customer"

    response = client.post("/api/users/register", json={
        "name": "Again",
        "email": "new@test.com",
        "password": "longenough",
    })
    assert response.status_code == 409

    response = client.post("/api/users/login", data={"username": "new@test.com", "password": "wrong-password"})
    assert response.status_code == 401

    response = client.post("/api/users/login", data={"username": "new@test.com", "password": "longenough"})
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = client.get("/api/users/profile", headers=headers)
    assert response.json()["name"] == "New Customer"

    response = client.put("/api/users/profile", json={"phone": "0999"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["phone"] == "0999"


def test_cannot_register_as_admin(client):
    response = client.post("/api/users/register", json={
        "name": "Sneaky",
        "email": "sneaky@test.com",
        "password": "longenough",
        "role": "admin",
    })
    assert response.status_code == 403


def test_profile_email_must_be_unique(client, world):
    response = client.put(
        "/api/users/profile",
        json={"email": "barber@test.com"},
        headers=world.headers["customer"],
    )
    assert response.status_code == 409


def test_seeded_password_logs_in(client, world):
    response = client.post("/api/users/login", data={"username": "customer@test.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == world.ids["customer"]


# ---------- shops ----------

def test_get_shop_detail(client, world):
    response = client.get(f"/api/shops/{world.shop_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["owner_id"] == world.ids["owner"]
    assert {b["id"] for b in data["barbers"]} == {world.ids["owner"], world.ids["barber"]}
    assert set(data["opening_hours"]) == {
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    }

    assert client.get("/api/shops/9999").status_code == 404


def test_create_shop_as_barber_attaches_creator(client, world):
    response = client.post(
        "/api/shops",
        json={
            "name": "Second Chair",
            "opening_hours": {
                "monday": {"opens": "10:00:00", "closes": "18:00:00"},
                "sunday": {"closed": True},
            },
        },
        headers=world.headers["stranger_barber"],
    )
    assert response.status_code == 201
    data = response.json()
    assert data["owner_id"] == world.ids["stranger_barber"]
    assert [b["id"] for b in data["barbers"]] == [world.ids["stranger_barber"]]
    assert data["opening_hours"]["monday"]["opens"] == "10:00:00"
    assert data["opening_hours"]["sunday"]["closed"] is True


def test_create_shop_rejects_customers_and_bad_hours(client, world):
    response = client.post("/api/shops", json={"name": "Nope"}, headers=world.headers["customer"])
    assert response.status_code == 403

    response = client.post(
        "/api/shops",
        json={"name": "Backwards", "opening_hours": {"monday": {"opens": "18:00:00", "closes": "10:00:00"}}},
        headers=world.headers["owner"],
    )
    assert response.status_code == 422


def test_update_shop_owner_only(client, world):
    url = f"/api/shops/{world.shop_id}"

    response = client.put(url, json={"name": "Renamed"}, headers=world.headers["barber"])
    assert response.status_code == 403

    response = client.put(
        url,
        json={"name": "Renamed", "opening_hours": {"friday": {"opens": "09:00:00", "closes": "13:00:00"}}},
        headers=world.headers["owner"],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert list(data["opening_hours"]) == ["friday"]


def test_add_barber_to_shop(client, world):
    url = f"/api/shops/{world.shop_id}/barbers"
    body = {"user_id": world.ids["stranger_barber"]}

    assert client.post(url, json=body, headers=world.headers["barber"]).status_code == 403
    assert client.post(url, json=body, headers=world.headers["owner"]).status_code == 201
    assert client.post(url, json=body, headers=world.headers["owner"]).status_code == 409
    assert client.post(
        url, json={"user_id": world.ids["customer"]}, headers=world.headers["owner"]
    ).status_code == 404

    # now part of the shop, may read its bookings
    response = client.get(f"/api/bookings/shop/{world.shop_id}", headers=world.headers["stranger_barber"])
    assert response.status_code == 200


def test_delete_shop_admin_only(client, world, book):
    book("09:00:00", "09:30:00")
    url = f"/api/shops/{world.shop_id}"
    assert client.delete(url, headers=world.headers["owner"]).status_code == 403
    assert client.delete(url, headers=world.headers["admin"]).status_code == 200
    assert client.get(url).status_code == 404


# ---------- services ----------

def test_service_crud_permissions(client, world):
    payload = {"name": "Beard trim", "price": 10, "duration": 20, "shop_id": world.shop_id}

    assert client.post("/api/services", json=payload, headers=world.headers["customer"]).status_code == 403

    response = client.post("/api/services", json=payload, headers=world.headers["barber"])
    assert response.status_code == 201
    service_id = response.json()["id"]

    response = client.put(f"/api/services/{service_id}", json={"price": 12}, headers=world.headers["barber"])
    assert response.json()["price"] == 12

    assert client.delete(f"/api/services/{service_id}", headers=world.headers["barber"]).status_code == 403
    assert client.delete(f"/api/services/{service_id}", headers=world.headers["owner"]).status_code == 200
    assert client.get(f"/api/services/{service_id}").status_code == 404


def test_service_with_bookings_cannot_be_deleted(client, world, book, db):
    booking_id = book("09:00:00", "09:30:00").json()["id"]
    client.put(
        f"/api/bookings/{booking_id}/status",
        json={"status": "completed"},
        headers=world.headers["barber"],
    )

    url = f"/api/services/{world.service_id}"
    for who in ("owner", "admin"):
        response = client.delete(url, headers=world.headers[who])
        assert response.status_code == 409, who
        assert response.json()["detail"] == "Service has bookings"

    assert client.get(url).status_code == 200
    with db.session() as session:
        rows = session.exec(select(Booking)).all()
    assert [(r.id, r.status) for r in rows] == [(booking_id, "completed")]


def test_shop_and_barber_service_listings(client, world):
    response = client.get(f"/api/shops/{world.shop_id}/services")
    assert [s["name"] for s in response.json()] == ["Haircut"]

    response = client.get(f"/api/services/barber/{world.ids['barber']}")
    assert response.status_code == 200
    assert [s["shop_name"] for s in response.json()] == ["Fade Factory"]

    response = client.get(f"/api/services/barber/{world.ids['stranger_barber']}")
    assert response.json() == []

    assert client.get(f"/api/services/barber/{world.ids['customer']}").status_code == 404


def test_popular_services_counts_bookings(client, world, book):
    client.post(
        "/api/services",
        json={"name": "Shave", "price": 8, "duration": 15, "shop_id": world.shop_id},
        headers=world.headers["owner"],
    )
    book("09:00:00", "09:30:00")
    book("10:00:00", "10:30:00")

    rows = client.get("/api/services/popular").json()
    assert [(r["name"], r["booking_count"]) for r in rows] == [("Haircut", 2), ("Shave", 0)]


# ---------- availability ----------

def _availability(client, world, on, barber="barber"):
    return client.get(
        f"/api/barbers/{world.ids[barber]}/availability",
        params={"shop_id": world.shop_id, "service_id": world.service_id, "date": on.isoformat()},
    )


def test_availability_excludes_bookings(client, world, book):
    book("09:30:00", "10:00:00")

    response = _availability(client, world, DAY)
    assert response.status_code == 200
    # 09:00-12:00, 30 minute service, 15 minute steps
    assert response.json()["available_starts"] == [
        "09:00", "10:00", "10:15", "10:30", "10:45", "11:00", "11:15", "11:30",
    ]


def test_availability_closed_day_is_empty(client, world):
    response = _availability(client, world, CLOSED_DAY)
    assert response.json()["available_starts"] == []


def test_availability_unknown_or_detached_barber(client, world):
    assert _availability(client, world, DAY, barber="customer").status_code == 404
    assert _availability(client, world, DAY, barber="stranger_barber").status_code == 404
