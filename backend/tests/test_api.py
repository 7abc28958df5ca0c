"""
HTTP API tests: gates, owner CRUD, image upload and the super-admin area.
"""

from unittest.mock import AsyncMock

from conftest import auth_headers_for, run
from shared.utils.exceptions import ExternalServiceError

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def create_category(client, headers, name="Mains"):
    response = client.post("/api/categories", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()


def create_item(client, headers, category_id, name="Steak", price=20):
    response = client.post(
        "/api/menu-items",
        json={"name": name, "price": price, "categoryId": category_id},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestProtectedRoutes:
    def test_missing_token_is_401(self, client):
        response = client.get("/api/categories")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token_is_401(self, client):
        response = client.get("/api/categories", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"

    def test_unsupported_content_type(self, client, owner_headers):
        response = client.post(
            "/api/categories",
            content="name=x",
            headers={**owner_headers, "Content-Type": "text/plain"},
        )
        assert response.status_code == 415


class TestRoot:
    def test_anonymous_gets_login(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 200
        assert response.json() == {"view": "login"}

    def test_owner_is_sent_to_dashboard(self, client, seed_owner, owner_headers):
        response = client.get("/", headers=owner_headers, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    def test_super_admin_is_sent_to_admin_dashboard(self, client, admin_headers):
        response = client.get("/", headers=admin_headers, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/super-admin/dashboard"


class TestCategoriesApi:
    def test_crud(self, client, owner_headers):
        created = create_category(client, owner_headers, "Starters")
        assert created["order"] == 1
        assert "createdAt" in created

        renamed = client.patch(
            f"/api/categories/{created['id']}", json={"name": "Small plates"}, headers=owner_headers
        )
        assert renamed.status_code == 200
        assert renamed.json()["name"] == "Small plates"

        listed = client.get("/api/categories", headers=owner_headers).json()
        assert [c["name"] for c in listed] == ["Small plates"]

        deleted = client.delete(f"/api/categories/{created['id']}", headers=owner_headers)
        assert deleted.status_code == 204
        assert client.get(f"/api/categories/{created['id']}", headers=owner_headers).status_code == 404

    def test_blank_name_is_400(self, client, owner_headers):
        response = client.post("/api/categories", json={"name": "  "}, headers=owner_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Category name is required"

    def test_delete_with_items_is_409(self, client, owner_headers):
        category = create_category(client, owner_headers)
        create_item(client, owner_headers, category["id"])

        response = client.delete(f"/api/categories/{category['id']}", headers=owner_headers)

        assert response.status_code == 409
        assert client.get(f"/api/categories/{category['id']}", headers=owner_headers).status_code == 200

    def test_tenants_cannot_see_each_other(self, client, owner_headers):
        category = create_category(client, owner_headers)
        other = auth_headers_for("owner-2")

        assert client.get("/api/categories", headers=other).json() == []
        assert client.get(f"/api/categories/{category['id']}", headers=other).status_code == 404
        assert client.delete(f"/api/categories/{category['id']}", headers=other).status_code == 404

    def test_toggle_visibility(self, client, owner_headers):
        category = create_category(client, owner_headers)
        response = client.post(
            f"/api/categories/{category['id']}/toggle-visibility", headers=owner_headers
        )
        assert response.json()["visible"] is False

    def test_image_upload_stores_url(self, client, owner_headers):
        category = create_category(client, owner_headers)

        response = client.put(
            f"/api/categories/{category['id']}/image",
            files={"file": ("pic.png", PNG, "image/png")},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["image"].startswith("data:image/png;base64,")

    def test_invalid_image_is_400(self, client, owner_headers):
        category = create_category(client, owner_headers)

        response = client.put(
            f"/api/categories/{category['id']}/image",
            files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
            headers=owner_headers,
        )

        assert response.status_code == 400

    def test_image_host_failure_keeps_the_category(self, client, container, owner_headers, monkeypatch):
        category = create_category(client, owner_headers)
        monkeypatch.setattr(
            container.media.uploader,
            "upload",
            AsyncMock(side_effect=ExternalServiceError("ImageKit", is_unavailable=True)),
        )

        response = client.put(
            f"/api/categories/{category['id']}/image",
            files={"file": ("pic.png", PNG, "image/png")},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.headers["x-image-upload"] == "failed"
        assert response.json()["image"] is None


class TestMenuItemsApi:
    def test_create_denormalizes_category_name(self, client, owner_headers):
        category = create_category(client, owner_headers, "Desserts")

        item = create_item(client, owner_headers, category["id"], "Cake", 6.5)

        assert item["categoryName"] == "Desserts"
        assert item["available"] is True

    def test_validation_errors(self, client, owner_headers):
        category = create_category(client, owner_headers)

        no_price = client.post(
            "/api/menu-items",
            json={"name": "Soup", "price": 0, "categoryId": category["id"]},
            headers=owner_headers,
        )
        no_category = client.post(
            "/api/menu-items", json={"name": "Soup", "price": 4}, headers=owner_headers
        )

        assert no_price.status_code == 400
        assert no_price.json()["detail"] == "Price must be greater than 0"
        assert no_category.json()["detail"] == "Please select a category"

    def test_filter_by_category(self, client, owner_headers):
        mains = create_category(client, owner_headers, "Mains")
        sides = create_category(client, owner_headers, "Sides")
        create_item(client, owner_headers, mains["id"], "Steak")
        create_item(client, owner_headers, sides["id"], "Fries", 3)

        response = client.get(
            "/api/menu-items", params={"categoryId": sides["id"]}, headers=owner_headers
        )

        assert [i["name"] for i in response.json()] == ["Fries"]

    def test_toggle_availability_and_update(self, client, owner_headers):
        category = create_category(client, owner_headers)
        item = create_item(client, owner_headers, category["id"])

        toggled = client.post(
            f"/api/menu-items/{item['id']}/toggle-availability", headers=owner_headers
        ).json()
        updated = client.patch(
            f"/api/menu-items/{item['id']}", json={"price": 25}, headers=owner_headers
        ).json()

        assert toggled["available"] is False
        assert updated["price"] == 25

    def test_orphaned_items_are_reported(self, client, container, owner_headers):
        category = create_category(client, owner_headers)
        item = create_item(client, owner_headers, category["id"])
        run(container.categories.delete("owner-1", category["id"]))

        response = client.get("/api/menu-items/orphaned", headers=owner_headers)

        assert [i["id"] for i in response.json()] == [item["id"]]


class TestProfileApi:
    def test_first_access_creates_profile(self, client, owner_headers):
        response = client.get("/api/profile", headers=owner_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["restaurantName"] == "My Restaurant"
        assert body["role"] == "restaurant_owner"
        assert body["isActive"] is True

    def test_malformed_stored_profile_is_400_and_left_alone(self, client, container, seed_owner, owner_headers):
        stored = {**seed_owner.to_document(), "role": "emperor"}
        run(container.store.set_doc("tenants/owner-1", stored))

        response = client.get("/api/profile", headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid profile data")
        assert run(container.store.get_doc("tenants/owner-1"))["restaurantName"] == "Owner Bistro"

    def test_update_profile(self, client, seed_owner, owner_headers):
        response = client.patch(
            "/api/profile",
            json={"restaurantName": "Renamed", "websiteUrl": "https://renamed.example"},
            headers=owner_headers,
        )
        assert response.json()["restaurantName"] == "Renamed"
        assert response.json()["websiteUrl"] == "https://renamed.example"

    def test_dashboard(self, client, seed_owner, owner_headers):
        category = create_category(client, owner_headers)
        create_item(client, owner_headers, category["id"])

        stats = client.get("/api/dashboard", headers=owner_headers).json()

        assert stats["restaurantName"] == "Owner Bistro"
        assert stats["totalCategories"] == 1
        assert stats["totalMenuItems"] == 1


class TestSuperAdminApi:
    def test_owner_is_redirected_to_dashboard(self, client, seed_owner, owner_headers):
        response = client.get("/api/super-admin/stats", headers=owner_headers, follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    def test_anonymous_is_401(self, client):
        assert client.get("/api/super-admin/stats").status_code == 401

    def test_stats(self, client, seed_owner, admin_headers, owner_headers):
        category = create_category(client, owner_headers)
        create_item(client, owner_headers, category["id"])
        create_item(client, owner_headers, category["id"], "Fish")

        stats = client.get("/api/super-admin/stats", headers=admin_headers).json()

        assert stats["totalRestaurants"] == 2
        assert stats["totalMenuItems"] == 2
        assert stats["averageItemsPerRestaurant"] == 1

    def test_restaurant_listing_and_search(self, client, seed_owner, admin_headers):
        everything = client.get("/api/super-admin/restaurants", headers=admin_headers).json()
        bistro = client.get(
            "/api/super-admin/restaurants", params={"search": "bistro"}, headers=admin_headers
        ).json()

        assert everything["pagination"]["total"] == 2
        assert [r["userId"] for r in bistro["items"]] == ["owner-1"]

    def test_unknown_status_filter_is_400(self, client, admin_headers):
        response = client.get(
            "/api/super-admin/restaurants", params={"status": "asleep"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_restaurant_detail(self, client, seed_owner, admin_headers, owner_headers):
        create_category(client, owner_headers)

        detail = client.get("/api/super-admin/restaurants/owner-1", headers=admin_headers)
        missing = client.get("/api/super-admin/restaurants/ghost", headers=admin_headers)

        assert detail.status_code == 200
        assert len(detail.json()["categories"]) == 1
        assert missing.status_code == 404

    def test_toggle_status(self, client, seed_owner, admin_headers):
        response = client.post(
            "/api/super-admin/restaurants/owner-1/toggle-status", headers=admin_headers
        )
        assert response.json() == {"userId": "owner-1", "isActive": False}

    def test_promote_then_access(self, client, seed_owner, admin_headers, owner_headers):
        response = client.patch(
            "/api/super-admin/users/owner-1/role", json={"role": "super_admin"}, headers=admin_headers
        )
        assert response.json()["role"] == "super_admin"

        assert client.get("/api/super-admin/stats", headers=owner_headers).status_code == 200

    def test_last_super_admin_cannot_demote_itself(self, client, admin_headers):
        response = client.patch(
            "/api/super-admin/users/admin-1/role",
            json={"role": "restaurant_owner"},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_user_listing_filters_by_role(self, client, seed_owner, admin_headers):
        response = client.get(
            "/api/super-admin/users", params={"role": "super_admin"}, headers=admin_headers
        )
        assert [u["id"] for u in response.json()["items"]] == ["admin-1"]

    def test_deactivate_user(self, client, seed_owner, admin_headers):
        response = client.patch(
            "/api/super-admin/users/owner-1/status", json={"isActive": False}, headers=admin_headers
        )
        assert response.json()["isActive"] is False


class TestHealthApi:
    def test_liveness(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"

    def test_detailed(self, client):
        body = client.get("/api/health/detailed").json()
        assert body["status"] == "healthy"
        assert body["components"]["document_store"]["status"] == "healthy"
