def test_add_and_fetch(client, member_headers, products):
    res = client.post("/api/favorites/add", json={"productId": products[1].id}, headers=member_headers)
    assert res.status_code == 200
    assert res.json() == {"message": "Item added to favorites"}

    body = client.get("/api/favorites/fetch", headers=member_headers).json()
    assert body["count"] == 1
    assert body["items"][0]["product_id"] == products[1].id
    assert body["items"][0]["products"]["name"] == "Mechanical Keyboard"


def test_duplicate_favorite_conflicts(client, member_headers, products):
    client.post("/api/favorites/add", json={"productId": products[0].id}, headers=member_headers)
    res = client.post("/api/favorites/add", json={"productId": products[0].id}, headers=member_headers)

    assert res.status_code == 409
    assert res.json() == {"message": "Item already exists in favorites"}


def test_favorites_are_per_user(client, member_headers, other_headers, products):
    client.post("/api/favorites/add", json={"productId": products[0].id}, headers=member_headers)

    assert client.post("/api/favorites/add", json={"productId": products[0].id},
                       headers=other_headers).status_code == 200
    assert client.get("/api/favorites/fetch", headers=other_headers).json()["count"] == 1


def test_unknown_product(client, member_headers):
    res = client.post("/api/favorites/add", json={"productId": 777}, headers=member_headers)
    assert res.status_code == 404
    assert res.json() == {"message": "Product not found"}


def test_anonymous_fetch_is_empty(client):
    assert client.get("/api/favorites/fetch").json() == {"items": [], "count": 0}


def test_anonymous_add_is_rejected(client, products):
    res = client.post("/api/favorites/add", json={"productId": products[0].id})
    assert res.status_code == 401
