API = "/api/v1"


def create_stock(client, product_id=1, quantity=10, **extra):
    resp = client.post(f"{API}/stock", json={"product_id": product_id, "quantity": quantity, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def purchase(client, product_id=1, quantity=1):
    return client.post(f"{API}/purchases", json={"product_id": product_id, "quantity": quantity})


def test_health(inventory_client):
    resp = inventory_client.get("/health")
    assert resp.json() == {"status": "ok", "service": "inventory-service"}


def test_create_and_get_stock(inventory_client):
    created = create_stock(inventory_client, quantity=10, min_quantity=2, max_quantity=50)

    assert created["product_id"] == 1
    assert created["quantity"] == 10
    assert created["active"] is True
    assert created["is_low_stock"] is False

    assert inventory_client.get(f"{API}/stock/{created['id']}").json()["product_id"] == 1
    assert inventory_client.get(f"{API}/stock/product/1").json()["id"] == created["id"]


def test_create_duplicate_stock_conflict(inventory_client):
    create_stock(inventory_client)

    resp = inventory_client.post(f"{API}/stock", json={"product_id": 1, "quantity": 5})

    assert resp.status_code == 409
    body = resp.json()
    assert body["status"] == 409
    assert body["error"] == "Conflict"
    assert body["path"] == f"{API}/stock"
    assert "timestamp" in body
    assert "already exists" in body["message"]


def test_create_stock_for_unknown_product(inventory_client):
    resp = inventory_client.post(f"{API}/stock", json={"product_id": 99, "quantity": 5})
    assert resp.status_code == 404


def test_create_stock_rejects_max_below_quantity(inventory_client):
    resp = inventory_client.post(f"{API}/stock", json={"product_id": 1, "quantity": 20, "max_quantity": 10})

    assert resp.status_code == 400
    assert "max_quantity" in resp.json()["details"]


def test_missing_stock_record(inventory_client):
    resp = inventory_client.get(f"{API}/stock/product/5")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Stock record not found"


def test_adjust_stock(inventory_client):
    create_stock(inventory_client, quantity=10, max_quantity=20)

    assert inventory_client.post(f"{API}/stock/product/1/increase", json={"quantity": 5}).json()["quantity"] == 15
    assert inventory_client.post(f"{API}/stock/product/1/decrease", json={"quantity": 3}).json()["quantity"] == 12
    assert inventory_client.put(f"{API}/stock/product/1/quantity", json={"quantity": 4}).json()["quantity"] == 4

    resp = inventory_client.post(f"{API}/stock/product/1/increase", json={"quantity": 50})
    assert resp.status_code == 409
    assert inventory_client.get(f"{API}/stock/product/1").json()["quantity"] == 4


def test_decrease_by_zero_is_rejected(inventory_client):
    create_stock(inventory_client, quantity=10)

    resp = inventory_client.post(f"{API}/stock/product/1/decrease", json={"quantity": 0})

    assert resp.status_code == 409
    assert inventory_client.get(f"{API}/stock/product/1").json()["quantity"] == 10


def test_check_stock(inventory_client):
    create_stock(inventory_client, quantity=3)

    assert inventory_client.get(f"{API}/stock/product/1/check", params={"quantity": 3}).json()["sufficient"] is True
    assert inventory_client.get(f"{API}/stock/product/1/check", params={"quantity": 4}).json()["sufficient"] is False


def test_deactivate_stock(inventory_client):
    create_stock(inventory_client)

    assert inventory_client.delete(f"{API}/stock/product/1").status_code == 204
    assert inventory_client.delete(f"{API}/stock/product/1").status_code == 204
    assert inventory_client.get(f"{API}/stock/product/1").json()["active"] is False
    assert inventory_client.get(f"{API}/stock").json()["total"] == 0
    assert purchase(inventory_client).status_code == 409


def test_stock_listing_and_statistics(inventory_client):
    create_stock(inventory_client, product_id=1, quantity=1, min_quantity=5)
    create_stock(inventory_client, product_id=2, quantity=30)

    page = inventory_client.get(f"{API}/stock", params={"size": 1}).json()
    assert page["total"] == 2
    assert len(page["items"]) == 1

    assert [r["product_id"] for r in inventory_client.get(f"{API}/stock/low-stock").json()] == [1]
    assert inventory_client.get(f"{API}/stock/statistics").json() == {
        "active_records": 2,
        "total_units": 31,
        "low_stock_count": 1,
    }


def test_purchase(inventory_client):
    create_stock(inventory_client, quantity=10, min_quantity=2)

    resp = purchase(inventory_client, quantity=5)

    assert resp.status_code == 201
    body = resp.json()
    assert body["unit_price"] == "10.00"
    assert body["total_price"] == "50.00"
    assert body["status"] == "completed"
    assert body["notes"] == "Purchase processed successfully"
    assert inventory_client.get(f"{API}/stock/product/1").json()["quantity"] == 5
    assert inventory_client.get(f"{API}/purchases/{body['id']}").json()["id"] == body["id"]


def test_purchase_insufficient_stock(inventory_client):
    create_stock(inventory_client, quantity=3)

    resp = purchase(inventory_client, quantity=10)

    assert resp.status_code == 409
    assert resp.json()["message"] == "Insufficient stock for product with id: 1"
    assert inventory_client.get(f"{API}/stock/product/1").json()["quantity"] == 3
    assert inventory_client.get(f"{API}/purchases").json()["total"] == 0


def test_purchase_unknown_product(inventory_client):
    resp = purchase(inventory_client, product_id=99)
    assert resp.status_code == 404
    assert inventory_client.get(f"{API}/purchases").json()["total"] == 0


def test_purchase_when_products_service_down(inventory_client, products):
    create_stock(inventory_client)
    products.down = True

    resp = purchase(inventory_client)

    assert resp.status_code == 503
    assert resp.json()["error"] == "Service Unavailable"


def test_purchase_validation_error(inventory_client):
    resp = inventory_client.post(f"{API}/purchases", json={"product_id": 1, "quantity": 0})

    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid request"
    assert "quantity" in body["details"]


def test_cancel_purchase(inventory_client):
    create_stock(inventory_client, quantity=10)
    purchase_id = purchase(inventory_client, quantity=5).json()["id"]

    resp = inventory_client.post(f"{API}/purchases/{purchase_id}/cancel")

    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["notes"] == "Purchase cancelled"
    assert inventory_client.get(f"{API}/stock/product/1").json()["quantity"] == 10

    again = inventory_client.post(f"{API}/purchases/{purchase_id}/cancel")
    assert again.status_code == 409
    assert inventory_client.get(f"{API}/stock/product/1").json()["quantity"] == 10


def test_cancel_missing_purchase(inventory_client):
    assert inventory_client.post(f"{API}/purchases/42/cancel").status_code == 404


def test_get_missing_purchase(inventory_client):
    resp = inventory_client.get(f"{API}/purchases/42")

    assert resp.status_code == 404
    assert resp.json()["path"] == f"{API}/purchases/42"


def test_verify_purchase(inventory_client, products):
    create_stock(inventory_client, quantity=5)

    def verify(product_id, quantity):
        params = {"product_id": product_id, "quantity": quantity}
        return inventory_client.get(f"{API}/purchases/verify", params=params).json()["can_process"]

    assert verify(1, 5) is True
    assert verify(1, 6) is False
    assert verify(99, 1) is False
    products.down = True
    assert verify(1, 1) is False


def test_purchase_queries(inventory_client):
    create_stock(inventory_client, product_id=1, quantity=10)
    create_stock(inventory_client, product_id=2, quantity=10)
    first = purchase(inventory_client, product_id=1, quantity=2).json()
    second = purchase(inventory_client, product_id=1, quantity=3).json()
    purchase(inventory_client, product_id=2, quantity=4)
    inventory_client.post(f"{API}/purchases/{second['id']}/cancel")

    by_product = inventory_client.get(f"{API}/purchases", params={"product_id": 1}).json()
    assert [p["id"] for p in by_product["items"]] == [first["id"], second["id"]]

    cancelled = inventory_client.get(f"{API}/purchases", params={"status": "cancelled"}).json()
    assert [p["id"] for p in cancelled["items"]] == [second["id"]]

    assert len(inventory_client.get(f"{API}/purchases/recent", params={"limit": 2}).json()) == 2
    assert inventory_client.get(f"{API}/purchases/product/1/total-sales").json() == {
        "product_id": 1,
        "total_sales": "20.00",
    }
    assert inventory_client.get(f"{API}/purchases/statistics").json() == {
        "total_purchases": 3,
        "total_sales": "30.00",
        "completed": 2,
        "cancelled": 1,
    }
