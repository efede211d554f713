def test_mark_paid_creates_payment_with_defaults(client, make_user, make_bet):
    bet = make_bet(make_user())

    response = client.post("/api/payments/mark", json={"weekly_bet_id": bet.id, "status": "PAID"})

    assert response.status_code == 200
    payment = response.json()
    assert payment["status"] == "PAID"
    assert payment["amount"] == 10.0
    assert payment["method"] == "Cash"
    assert payment["paid_at"] is not None


def test_mark_unpaid_reuses_payment(client, make_user, make_bet):
    bet = make_bet(make_user())

    paid = client.post(
        "/api/payments/mark",
        json={"weekly_bet_id": bet.id, "status": "PAID", "method": "Venmo", "amount": 20},
    ).json()
    unpaid = client.post(
        "/api/payments/mark", json={"weekly_bet_id": bet.id, "status": "UNPAID"}
    ).json()

    assert unpaid["id"] == paid["id"]
    assert unpaid["status"] == "PENDING"
    assert unpaid["paid_at"] is None
    assert unpaid["method"] == "Venmo"
    assert unpaid["amount"] == 20.0


def test_mark_validates_request(client):
    missing = client.post("/api/payments/mark", json={"weekly_bet_id": 999, "status": "PAID"})
    bad_status = client.post("/api/payments/mark", json={"weekly_bet_id": 1, "status": "MAYBE"})

    assert missing.status_code == 404
    assert missing.json()["detail"] == "Bet not found"
    assert bad_status.status_code == 422


def test_create_update_and_delete_payment(client, make_user, make_bet):
    user = make_user()
    bet = make_bet(user)

    created = client.post(
        "/api/payments",
        json={"user_id": user.id, "weekly_bet_id": bet.id, "amount": 10, "method": "Cash"},
    )
    assert created.status_code == 201
    payment_id = created.json()["id"]
    assert created.json()["status"] == "PENDING"

    patched = client.patch(f"/api/payments/{payment_id}", json={"status": "PAID"})
    assert patched.json()["status"] == "PAID"
    assert patched.json()["paid_at"] is not None

    assert client.delete(f"/api/payments/{payment_id}").status_code == 200
    assert client.delete(f"/api/payments/{payment_id}").status_code == 404


def test_create_payment_for_unknown_user(client, make_user, make_bet):
    bet = make_bet(make_user())

    response = client.post(
        "/api/payments",
        json={"user_id": 999, "weekly_bet_id": bet.id, "amount": 10, "method": "Cash"},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_list_payments_by_status(client, make_user, make_bet):
    first = make_bet(make_user())
    second = make_bet(make_user())
    client.post("/api/payments/mark", json={"weekly_bet_id": first.id, "status": "PAID"})
    client.post("/api/payments/mark", json={"weekly_bet_id": second.id, "status": "UNPAID"})

    paid = client.get("/api/payments", params={"status": "PAID"}).json()
    pending = client.get("/api/payments", params={"status": "PENDING"}).json()

    assert [payment["weekly_bet_id"] for payment in paid] == [first.id]
    assert [payment["weekly_bet_id"] for payment in pending] == [second.id]
