
def test_user_reserves_for_self(client, make_user, make_book, auth_header):
    user = make_user()
    book = make_book(quantity=0)

    resp = client.post("/api/Reservations", json={"userId": user.id, "bookId": book.id}, headers=auth_header(user))

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["status"] == "Pending"
    assert data["userId"] == user.id


def test_reservation_error_codes(client, make_user, make_book, auth_header):
    x, y = make_user(), make_user()
    book = make_book(quantity=0)
    no_stock = make_book(quantity=None)
    headers = auth_header(x)

    resp = client.post("/api/Reservations", json={"userId": y.id, "bookId": book.id}, headers=headers)
    assert resp.status_code == 403

    client.post("/api/Reservations", json={"userId": x.id, "bookId": book.id}, headers=headers)
    resp = client.post("/api/Reservations", json={"userId": x.id, "bookId": book.id}, headers=headers)
    assert resp.status_code == 409

    resp = client.post("/api/Reservations", json={"userId": x.id, "bookId": no_stock.id}, headers=headers)
    assert resp.status_code == 400
    assert "No stock configured" in resp.get_json()["error"]


def test_staff_cannot_create_reservations(client, librarian, make_book, auth_header):
    book = make_book(quantity=0)
    resp = client.post(
        "/api/Reservations", json={"userId": librarian.id, "bookId": book.id}, headers=auth_header(librarian)
    )
    assert resp.status_code == 403


def test_get_reservation_owner_or_staff(client, make_user, librarian, make_book, auth_header):
    owner, other = make_user(), make_user()
    book = make_book(quantity=0)
    rid = client.post(
        "/api/Reservations", json={"userId": owner.id, "bookId": book.id}, headers=auth_header(owner)
    ).get_json()["data"]["id"]

    assert client.get(f"/api/Reservations/{rid}", headers=auth_header(owner)).status_code == 200
    assert client.get(f"/api/Reservations/{rid}", headers=auth_header(librarian)).status_code == 200
    assert client.get(f"/api/Reservations/{rid}", headers=auth_header(other)).status_code == 403
    assert client.get("/api/Reservations/9999", headers=auth_header(owner)).status_code == 404

    assert client.get(f"/api/Reservations/user/{owner.id}", headers=auth_header(other)).status_code == 403
    mine = client.get(f"/api/Reservations/user/{owner.id}", headers=auth_header(owner)).get_json()["data"]
    assert [r["id"] for r in mine] == [rid]


def test_pending_queue_and_delete(client, make_user, admin, make_book, auth_header):
    book = make_book(quantity=0)
    a, b = make_user(), make_user()
    for u in (a, b):
        client.post("/api/Reservations", json={"userId": u.id, "bookId": book.id}, headers=auth_header(u))

    staff = auth_header(admin)
    queue = client.get(f"/api/Reservations/book/{book.id}/pending", headers=staff).get_json()["data"]
    assert [r["userId"] for r in queue] == [a.id, b.id]

    first = queue[0]["id"]
    assert client.delete(f"/api/Reservations/{first}", headers=auth_header(b)).status_code == 403
    assert client.delete(f"/api/Reservations/{first}", headers=auth_header(a)).status_code == 200
    assert client.delete(f"/api/Reservations/{first}", headers=staff).status_code == 404


def test_update_reservation_status(client, make_user, librarian, make_book, auth_header):
    user = make_user()
    book = make_book(quantity=0)
    rid = client.post(
        "/api/Reservations", json={"userId": user.id, "bookId": book.id}, headers=auth_header(user)
    ).get_json()["data"]["id"]

    staff = auth_header(librarian)
    resp = client.put(f"/api/Reservations/{rid}", json={"status": "Completed"}, headers=staff)
    assert resp.status_code == 400

    resp = client.put(f"/api/Reservations/{rid}", json={"status": "Cancelled"}, headers=staff)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "Cancelled"

    assert client.put(f"/api/Reservations/{rid}", json={}, headers=auth_header(user)).status_code == 403


def test_cleanup_endpoint(client, librarian, auth_header):
    resp = client.post("/api/Reservations/cleanup-expired", headers=auth_header(librarian))
    assert resp.status_code == 200
    assert resp.get_json()["count"] == 0


def test_update_to_available_without_copy_is_rejected(client, make_user, librarian, make_book, auth_header):
    user = make_user()
    book = make_book(quantity=0)
    rid = client.post(
        "/api/Reservations", json={"userId": user.id, "bookId": book.id}, headers=auth_header(user)
    ).get_json()["data"]["id"]

    resp = client.put(f"/api/Reservations/{rid}", json={"status": "Available"}, headers=auth_header(librarian))

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Book unavailable."
    assert client.get(f"/api/Reservations/{rid}", headers=auth_header(user)).get_json()["data"]["status"] == "Pending"
