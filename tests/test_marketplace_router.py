"""End-to-end flows over HTTP: list a book, buy it, review the seller."""

API = "/api/v1"


def _create_posting(client, headers, title="Linear Algebra Done Right", price=300):
    res = client.post(
        f"{API}/postings",
        json={"title": title, "price": price, "description": "Lightly highlighted"},
        headers=headers,
    )
    assert res.status_code == 201
    return res.json()["data"]["posting"]


def test_top_up_and_balance(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user)

    res = client.post(f"{API}/users/topup", json={"amount": 1000}, headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["balance"] == 1000

    res = client.post(f"{API}/users/topup", json={"amount": 100001}, headers=headers)
    assert res.status_code == 400

    res = client.get(f"{API}/users/balance", headers=headers)
    assert res.json()["data"]["balance"] == 1000


def test_buy_book_flow(client, make_user, auth_headers):
    seller, buyer = make_user(), make_user(balance=1000)
    posting = _create_posting(client, auth_headers(seller))
    assert posting["status"] == "listed"

    res = client.post(f"{API}/orders", json={"postingId": posting["id"]}, headers=auth_headers(buyer))
    assert res.status_code == 201
    order = res.json()["data"]["order"]
    assert order["deal_price"] == 300

    assert client.get(f"{API}/users/balance", headers=auth_headers(buyer)).json()["data"]["balance"] == 700
    assert client.get(f"{API}/users/balance", headers=auth_headers(seller)).json()["data"]["balance"] == 300

    # sold postings drop out of the default listing
    listing = client.get(f"{API}/postings").json()
    assert listing["data"]["total_count"] == 0

    res = client.get(f"{API}/postings/{posting['id']}")
    assert res.json()["data"]["posting"]["status"] == "sold"

    # a second purchase attempt is refused
    res = client.post(f"{API}/orders", json={"postingId": posting["id"]}, headers=auth_headers(make_user(balance=1000)))
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "LISTING_UNAVAILABLE"

    # the buyer rates the seller
    res = client.post(
        f"{API}/reviews",
        json={"orderId": order["id"], "rating": 5, "comment": "Fast handover"},
        headers=auth_headers(buyer),
    )
    assert res.status_code == 201
    res = client.get(f"{API}/reviews/average", params={"userId": seller.id}, headers=auth_headers(buyer))
    assert res.json()["data"]["average"] == 5.0

    integrity = client.get(f"{API}/transactions/integrity", headers=auth_headers(buyer))
    assert integrity.json()["data"]["status"] == "OK"


def test_purchase_with_insufficient_funds(client, make_user, auth_headers):
    seller, buyer = make_user(), make_user(balance=100)
    posting = _create_posting(client, auth_headers(seller))

    res = client.post(f"{API}/orders", json={"postingId": posting["id"]}, headers=auth_headers(buyer))

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "BALANCE_001"
    assert client.get(f"{API}/postings/{posting['id']}").json()["data"]["posting"]["status"] == "listed"


def test_blank_title_rejected(client, make_user, auth_headers):
    res = client.post(
        f"{API}/postings", json={"title": "   ", "price": 100}, headers=auth_headers(make_user())
    )
    assert res.status_code == 400


def test_only_seller_edits_posting(client, make_user, auth_headers):
    seller, other = make_user(), make_user()
    posting = _create_posting(client, auth_headers(seller))

    res = client.put(f"{API}/postings/{posting['id']}", json={"price": 250}, headers=auth_headers(other))
    assert res.status_code == 403

    res = client.put(f"{API}/postings/{posting['id']}", json={"price": 250}, headers=auth_headers(seller))
    assert res.status_code == 200
    assert res.json()["data"]["posting"]["price"] == 250


def test_search_filters(client, make_user, auth_headers):
    headers = auth_headers(make_user())
    _create_posting(client, headers, title="Organic Chemistry", price=500)
    _create_posting(client, headers, title="Calculus Early Transcendentals", price=200)

    res = client.get(f"{API}/postings", params={"keyword": "calculus"})
    assert res.json()["data"]["total_count"] == 1

    res = client.get(f"{API}/postings", params={"minPrice": 300})
    assert [p["title"] for p in res.json()["data"]["postings"]] == ["Organic Chemistry"]

    res = client.get(f"{API}/postings", params={"minPrice": 600, "maxPrice": 100})
    assert res.status_code == 400


def test_report_posting(client, make_user, auth_headers):
    seller, reporter = make_user(), make_user()
    posting = _create_posting(client, auth_headers(seller))

    payload = {"reportType": "posting", "targetId": posting["id"], "reason": "Counterfeit copy"}
    res = client.post(f"{API}/reports", json=payload, headers=auth_headers(reporter))
    assert res.status_code == 201
    assert res.json()["data"]["report"]["status"] == "pending"

    res = client.post(f"{API}/reports", json=payload, headers=auth_headers(reporter))
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "ALREADY_REPORTED"


def test_order_violation_requires_target_user(client, make_user, auth_headers):
    res = client.post(
        f"{API}/reports",
        json={"reportType": "order_violation", "targetId": 1, "reason": "no-show"},
        headers=auth_headers(make_user()),
    )
    assert res.status_code == 400
