"""HTTP-level tests: token verification, RBAC enforcement, error envelope."""

import pytest

from tests.fakes import auth_headers


class TestAuthentication:
    async def test_health_is_public(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_missing_header(self, client):
        response = await client.get("/api/v1/products/")
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["message"] == "Missing Authorization header"

    async def test_wrong_scheme(self, client):
        response = await client.get("/api/v1/products/", headers={"Authorization": "Token abc"})
        assert response.status_code == 401

    async def test_garbage_token(self, client):
        response = await client.get(
            "/api/v1/products/", headers={"Authorization": "Bearer not.a.jwt"}
        )
        assert response.status_code == 401
        assert "Invalid or expired token" in response.json()["error"]["message"]


class TestAuthorization:
    async def test_staff_cannot_read_users(self, client):
        response = await client.get("/api/v1/users/available-roles", headers=auth_headers("STAFF"))
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Permission denied. Requires: users:read"

    @pytest.mark.parametrize(
        "role,expected",
        [
            ("SUPER_ADMIN", ["STAFF", "MANAGER", "ADMIN"]),
            ("ADMIN", ["STAFF", "MANAGER"]),
            ("MANAGER", ["STAFF"]),
        ],
    )
    async def test_available_roles(self, client, role, expected):
        response = await client.get("/api/v1/users/available-roles", headers=auth_headers(role))
        assert response.status_code == 200
        assert response.json()["data"]["roles"] == expected

    async def test_role_is_case_insensitive(self, client):
        response = await client.get("/api/v1/users/available-roles", headers=auth_headers("admin"))
        assert response.status_code == 200

    @pytest.mark.parametrize("role", ["OWNER", None])
    async def test_unknown_role_is_denied(self, client, role):
        response = await client.get("/api/v1/products/", headers=auth_headers(role))
        assert response.status_code == 403

    async def test_manager_cannot_delete_products(self, client, product_id):
        response = await client.delete(
            f"/api/v1/products/{product_id}", headers=auth_headers("MANAGER")
        )
        assert response.status_code == 403
        assert "products:delete" in response.json()["error"]["message"]

    async def test_admin_cannot_update_settings(self, client):
        response = await client.put(
            "/api/v1/settings/", json={"store_name": "X"}, headers=auth_headers("ADMIN")
        )
        assert response.status_code == 403

    async def test_analytics_closed_to_staff(self, client):
        response = await client.get("/api/v1/analytics/dashboard", headers=auth_headers("STAFF"))
        assert response.status_code == 403


class TestVariantEndpoints:
    @pytest.fixture(autouse=True)
    def use_fake_repository(self, monkeypatch, variant_repo):
        monkeypatch.setattr(
            "solestore.variants.service.VariantRepository", lambda db: variant_repo
        )

    @staticmethod
    def _matrix() -> dict:
        return {
            "sizes": ["8", "9"],
            "colors": ["Black", "White"],
            "selected_combinations": [
                {"size": "8", "color": "Black"},
                {"size": "9", "color": "White"},
            ],
            "base_price": 110,
            "base_stock": 6,
            "base_sku": "mz-trail",
        }

    async def test_matrix_create(self, client, product_id):
        response = await client.post(
            f"/api/v1/products/{product_id}/variants/matrix",
            json=self._matrix(),
            headers=auth_headers("MANAGER"),
        )
        assert response.status_code == 201
        skus = [v["sku"] for v in response.json()["data"]]
        assert skus == ["mz-trail-8-BLA", "mz-trail-9-WHI"]

    async def test_matrix_conflict_envelope(self, client, variant_repo, product_id):
        variant_repo.add(
            product_id=product_id, size="8", color="Black", sku="OLD", price=1, stock=1
        )

        response = await client.post(
            f"/api/v1/products/{product_id}/variants/matrix",
            json=self._matrix(),
            headers=auth_headers("ADMIN"),
        )
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert "8/Black" in body["error"]["message"]
        assert body["data"]["duplicates"] == [{"size": "8", "color": "Black"}]
        assert variant_repo.insert_calls == 0

    async def test_matrix_forbidden_for_staff(self, client, variant_repo, product_id):
        response = await client.post(
            f"/api/v1/products/{product_id}/variants/matrix",
            json=self._matrix(),
            headers=auth_headers("STAFF"),
        )
        assert response.status_code == 403
        assert variant_repo.docs == {}

    async def test_empty_matrix(self, client, product_id):
        response = await client.post(
            f"/api/v1/products/{product_id}/variants/matrix",
            json={**self._matrix(), "sizes": []},
            headers=auth_headers("ADMIN"),
        )
        assert response.status_code == 400

    async def test_stock_adjustment(self, client, variant_repo, product_id):
        doc = variant_repo.add(
            product_id=product_id, size="8", color="Black", sku="S-1", price=1, stock=3
        )

        response = await client.put(
            f"/api/v1/products/{product_id}/variants/{doc['_id']}/stock",
            json={"adjustment": -10},
            headers=auth_headers("MANAGER"),
        )
        assert response.status_code == 200
        assert response.json()["data"]["stock"] == 0

    async def test_stock_needs_a_value(self, client, variant_repo, product_id):
        doc = variant_repo.add(
            product_id=product_id, size="8", color="Black", sku="S-1", price=1, stock=3
        )

        response = await client.put(
            f"/api/v1/products/{product_id}/variants/{doc['_id']}/stock",
            json={},
            headers=auth_headers("MANAGER"),
        )
        assert response.status_code == 400
