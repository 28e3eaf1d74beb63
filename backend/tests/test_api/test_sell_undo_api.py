"""
API tests for the sell and undo endpoints
"""
import pytest

from stockledger.domain.product import Product


def stock_of(storage, user_id, product_id):
    return storage.get_record(user_id, Product.COLLECTION, product_id)["quantity"]


class TestSellEndpoint:
    """Test POST /products/{product_id}/sell"""

    def test_requires_token(self, client, create_product):
        product = create_product()

        response = client.post(f"/products/{product.id}/sell", json={"quantitySold": 1})

        assert response.status_code == 401

    def test_sell_returns_sale_id(self, client, auth_headers, storage, user_id, create_product):
        product = create_product(quantity=10)

        response = client.post(
            f"/products/{product.id}/sell",
            json={"quantitySold": 3, "saleData": {"customer": "Ana", "price": 15.5}},
            headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["product_id"] == product.id
        assert body["data"]["quantity_sold"] == 3
        assert stock_of(storage, user_id, product.id) == 7

        sale = client.get(f"/sales/{body['data']['sale_id']}", headers=auth_headers).json()["data"]
        assert sale["sale_data"] == {"customer": "Ana", "price": 15.5}
        assert sale["is_cancelled"] is False

    def test_sell_accepts_snake_case_body(self, client, auth_headers, storage, user_id, create_product):
        product = create_product(quantity=4)

        response = client.post(
            f"/products/{product.id}/sell",
            json={"quantity_sold": 4},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert stock_of(storage, user_id, product.id) == 0

    def test_insufficient_stock_is_conflict(self, client, auth_headers, storage, user_id, create_product):
        product = create_product(quantity=2)

        response = client.post(
            f"/products/{product.id}/sell",
            json={"quantitySold": 3},
            headers=auth_headers
        )

        assert response.status_code == 409
        body = response.json()
        assert body["status"] == "error"
        assert body["kind"] == "insufficient_stock"
        assert body["retryable"] is False
        assert stock_of(storage, user_id, product.id) == 2

    def test_unknown_product_is_not_found(self, client, auth_headers):
        response = client.post("/products/missing/sell", json={"quantitySold": 1}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    def test_zero_quantity_is_bad_request(self, client, auth_headers, create_product):
        product = create_product(quantity=2)

        response = client.post(
            f"/products/{product.id}/sell",
            json={"quantitySold": 0},
            headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_quantity"

    @pytest.mark.parametrize("body", [{}, {"quantitySold": "three"}, {"quantitySold": 1.5}, {"quantitySold": None}])
    def test_missing_or_non_integer_quantity_is_bad_request(self, client, auth_headers, storage,
                                                            user_id, create_product, body):
        product = create_product(quantity=2)

        response = client.post(f"/products/{product.id}/sell", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_quantity"
        assert response.json()["retryable"] is False
        assert stock_of(storage, user_id, product.id) == 2

    def test_other_users_product_is_not_found(self, client, other_auth_headers, storage,
                                              user_id, create_product):
        product = create_product(quantity=5)

        response = client.post(
            f"/products/{product.id}/sell",
            json={"quantitySold": 1},
            headers=other_auth_headers
        )

        assert response.status_code == 404
        assert stock_of(storage, user_id, product.id) == 5


class TestUndoEndpoint:
    """Test PUT /sales/{sale_id}/undo"""

    def test_undo_restores_stock(self, client, auth_headers, storage, user_id, create_product, seller):
        product = create_product(quantity=10)
        sale_id = seller.sell(user_id, product.id, 4)

        response = client.put(
            f"/sales/{sale_id}/undo",
            json={"productId": product.id, "quantitySold": 4},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["sale_id"] == sale_id
        assert data["quantity_restored"] == 4
        assert data["product_restored"] is True
        assert stock_of(storage, user_id, product.id) == 10

    def test_undo_without_body(self, client, auth_headers, storage, user_id, create_product, seller):
        product = create_product(quantity=10)
        sale_id = seller.sell(user_id, product.id, 4)

        response = client.put(f"/sales/{sale_id}/undo", headers=auth_headers)

        assert response.status_code == 200
        assert stock_of(storage, user_id, product.id) == 10

    def test_body_quantity_is_ignored(self, client, auth_headers, storage, user_id, create_product, seller):
        """Test the stored sale decides how much is restored"""
        product = create_product(quantity=10)
        sale_id = seller.sell(user_id, product.id, 4)

        response = client.put(
            f"/sales/{sale_id}/undo",
            json={"productId": product.id, "quantitySold": 99},
            headers=auth_headers
        )

        assert response.status_code == 200
        assert stock_of(storage, user_id, product.id) == 10

    def test_double_undo_is_bad_request(self, client, auth_headers, storage, user_id, create_product, seller):
        product = create_product(quantity=10)
        sale_id = seller.sell(user_id, product.id, 4)
        client.put(f"/sales/{sale_id}/undo", headers=auth_headers)

        response = client.put(f"/sales/{sale_id}/undo", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["kind"] == "already_cancelled"
        assert stock_of(storage, user_id, product.id) == 10

    def test_unknown_sale_is_not_found(self, client, auth_headers):
        response = client.put("/sales/missing/undo", headers=auth_headers)

        assert response.status_code == 404

    def test_other_users_sale_is_not_found(self, client, other_auth_headers, user_id, create_product, seller):
        product = create_product(quantity=10)
        sale_id = seller.sell(user_id, product.id, 4)

        response = client.put(f"/sales/{sale_id}/undo", headers=other_auth_headers)

        assert response.status_code == 404

    def test_undo_after_product_deleted_warns(self, client, auth_headers, user_id, create_product, seller):
        product = create_product(quantity=10)
        sale_id = seller.sell(user_id, product.id, 4)
        client.delete(f"/products/{product.id}", headers=auth_headers)

        response = client.put(f"/sales/{sale_id}/undo", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["product_restored"] is False
        assert data["warning"]


class TestSalesListing:
    """Test GET /sales"""

    def test_lists_only_callers_sales(self, client, auth_headers, other_auth_headers,
                                      user_id, create_product, seller):
        product = create_product(quantity=10)
        seller.sell(user_id, product.id, 1)
        seller.sell(user_id, product.id, 2)

        mine = client.get("/sales", headers=auth_headers).json()
        theirs = client.get("/sales", headers=other_auth_headers).json()

        assert mine["total"] == 2
        assert theirs["total"] == 0

    def test_excludes_cancelled_on_request(self, client, auth_headers, user_id, create_product, seller, undoer):
        product = create_product(quantity=10)
        kept = seller.sell(user_id, product.id, 1)
        undone = seller.sell(user_id, product.id, 2)
        undoer.undo_sale(user_id, undone)

        response = client.get("/sales", params={"include_cancelled": False}, headers=auth_headers)

        assert [sale["id"] for sale in response.json()["data"]] == [kept]
