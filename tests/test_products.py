def test_create_and_read_back(client, product_payload):
    res = client.post("/products", json=product_payload)
    assert res.status_code == 201

    new_id = res.json()["id"]

    assert client.get("/products/Laptop").json() == dict(product_payload, id=new_id)


def test_duplicate_name(client, db, product_payload):
    client.post("/products", json=product_payload)
    res = client.post("/products", json=dict(product_payload, price=1))
    assert res.status_code == 400
    assert res.json() == {"error": "Product with this name already exists"}
    assert db["products"].count_documents({}) == 1


def test_update_and_delete(client, product_payload):
    client.post("/products", json=product_payload)
    assert client.put("/products/Laptop", json={"price": 899}).status_code == 200

    body = client.get("/products/Laptop").json()
    assert body["price"] == 899
    assert body["description"] == product_payload["description"]

    assert client.delete("/products/Laptop").status_code == 200
    assert client.delete("/products/Laptop").status_code == 404


def test_delete_product_keeps_purchase_history(client, product_payload, customer_payload):
    client.post("/products", json=product_payload)
    client.post("/customers", json=customer_payload)
    client.delete("/products/Laptop")
    body = client.get("/customers/Alice").json()
    assert body["products"][0]["name"] == "Laptop"


def test_list(client, product_payload):
    client.post("/products", json=product_payload)
    client.post("/products", json=dict(product_payload, name="Mouse", price=20))
    assert [p["name"] for p in client.get("/products").json()] == ["Laptop", "Mouse"]


def test_negative_price_rejected(client, product_payload):
    res = client.post("/products", json=dict(product_payload, price=-1))
    assert res.status_code == 400


def test_minimal_product_reads_back_unchanged(client):
    payload = {"name": "Mouse", "price": 5.0}
    new_id = client.post("/products", json=payload).json()["id"]
    assert client.get("/products/Mouse").json() == {"id": new_id, "name": "Mouse", "price": 5.0}


def test_update_cannot_null_name_or_price(client, db, product_payload):
    client.post("/products", json=product_payload)
    for field in ("name", "price"):
        res = client.put("/products/Laptop", json={field: None})
        assert res.status_code == 400
    assert db["products"].find_one({"name": "Laptop"})["price"] == 999.5
