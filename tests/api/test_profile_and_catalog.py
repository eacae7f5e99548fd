"""HTTP tests for /profile, /categories and /brands with a mocked database."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from solestore.app import app
from solestore.config import get_database
from tests.fakes import FakeCursor, auth_headers, mock_db


@pytest.fixture
def db_collections(client) -> dict:
    """Collections behind the database dependency for the current test."""
    collections: dict = {}
    app.dependency_overrides[get_database] = lambda: mock_db(**collections)
    return collections


def _me(sub: str = "user_1") -> dict:
    return {
        "_id": ObjectId(),
        "external_id": sub,
        "email": f"{sub}@solestore.test",
        "first_name": "Ada",
        "role": "STAFF",
        "is_deleted": False,
    }


class TestProfile:
    async def test_get_own_profile(self, client, db_collections):
        me = _me()
        users = MagicMock(find_one=AsyncMock(return_value=me))
        db_collections["users"] = users

        response = await client.get("/api/v1/profile/", headers=auth_headers("STAFF"))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "user_1@solestore.test"
        flt = users.find_one.await_args.args[0]
        assert flt["$or"] == [{"external_id": "user_1"}]
        assert flt["is_deleted"] == {"$ne": True}

    async def test_update_applies_name_fields_only(self, client, db_collections):
        me = _me()
        users = MagicMock()
        users.find_one_and_update = AsyncMock(
            side_effect=lambda flt, update, **kw: {**me, **update["$set"]}
        )
        db_collections["users"] = users

        response = await client.put(
            "/api/v1/profile/",
            json={"first_name": "Grace", "role": "SUPER_ADMIN", "email": "x@solestore.test"},
            headers=auth_headers("STAFF"),
        )

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Grace"
        assert response.json()["data"]["role"] == "STAFF"
        applied = users.find_one_and_update.await_args.args[1]["$set"]
        assert set(applied) == {"first_name", "updated_at"}

    async def test_nothing_to_update(self, client, db_collections):
        users = MagicMock(find_one_and_update=AsyncMock())
        db_collections["users"] = users

        response = await client.put(
            "/api/v1/profile/", json={"email": "x@solestore.test"}, headers=auth_headers("MANAGER")
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No valid fields to update"
        users.find_one_and_update.assert_not_awaited()

    async def test_unknown_user(self, client, db_collections):
        db_collections["users"] = MagicMock(find_one=AsyncMock(return_value=None))

        response = await client.get("/api/v1/profile/", headers=auth_headers("ADMIN", sub="ghost"))
        assert response.status_code == 404

    async def test_unrecognised_role(self, client, db_collections):
        response = await client.get("/api/v1/profile/", headers=auth_headers("OWNER"))
        assert response.status_code == 403


class TestCategoriesAndBrands:
    async def test_staff_lists_brands(self, client, db_collections):
        brand = {"_id": ObjectId(), "name": "Asics", "slug": "asics", "is_active": True}
        db_collections["brands"] = MagicMock(find=MagicMock(return_value=FakeCursor([brand])))
        db_collections["products"] = MagicMock(
            aggregate=MagicMock(return_value=FakeCursor([{"_id": str(brand["_id"]), "count": 4}]))
        )

        response = await client.get("/api/v1/brands/", headers=auth_headers("STAFF"))

        assert response.status_code == 200
        assert response.json()["data"] == [
            {"_id": str(brand["_id"]), "name": "Asics", "slug": "asics", "is_active": True, "product_count": 4}
        ]

    async def test_staff_cannot_create_category(self, client, db_collections):
        response = await client.post(
            "/api/v1/categories/", json={"name": "Trail"}, headers=auth_headers("STAFF")
        )
        assert response.status_code == 403
        assert "products:create" in response.json()["error"]["message"]

    async def test_manager_cannot_delete_category(self, client, db_collections):
        response = await client.delete(
            f"/api/v1/categories/{ObjectId()}", headers=auth_headers("MANAGER")
        )
        assert response.status_code == 403

    async def test_delete_with_products_assigned(self, client, db_collections):
        oid = ObjectId()
        categories = MagicMock(find_one=AsyncMock(return_value={"_id": oid, "name": "Running"}))
        categories.delete_one = AsyncMock()
        db_collections["categories"] = categories
        db_collections["products"] = MagicMock(count_documents=AsyncMock(return_value=2))

        response = await client.delete(f"/api/v1/categories/{oid}", headers=auth_headers("ADMIN"))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["message"] == "Cannot delete category. It has 2 products assigned to it."
        categories.delete_one.assert_not_awaited()
