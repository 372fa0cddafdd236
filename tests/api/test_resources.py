"""API resource tests."""

from datetime import UTC, datetime, timedelta

from falcon.testing import TestClient

from garage_rbac.domain.catalog import permission_id_for

from tests.api.conftest import ADMIN, CLERK
from tests.conftest import TENANT_ID


def _role_id(store, key: str) -> str:
    role = next(r for r in store.roles._by_id.values() if r.key == key)
    return str(role.id)


class TestAuthentication:
    def test_missing_user_is_401(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/me/permissions")
        assert result.status_code == 401

    def test_sign_out(self, client: TestClient) -> None:
        assert client.simulate_post("/v1/session/sign-out", headers=CLERK).status_code == 204
        assert client.simulate_post("/v1/session/sign-out").status_code == 401


class TestChecks:
    def test_me(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/me/permissions", headers=CLERK)
        assert result.status_code == 200
        assert result.json["roles"] == ["receptionist"]
        assert result.json["tenant_id"] == str(TENANT_ID)
        assert "customers.create" in result.json["permissions"]
        assert not result.json["is_super_role"]

    def test_check_fine_and_coarse(self, client: TestClient) -> None:
        def allowed(permission: str) -> bool:
            result = client.simulate_get(
                "/v1/permissions/check", params={"permission": permission}, headers=CLERK
            )
            assert result.status_code == 200
            return result.json["allowed"]

        assert allowed("invoices.view")
        assert allowed("invoices")
        assert not allowed("invoices.void")
        assert not allowed("nonsense")

    def test_check_edit(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/permissions/check",
            params={"permission": "customers", "edit": "true"},
            headers=CLERK,
        )
        assert result.json["allowed"]
        result = client.simulate_get(
            "/v1/permissions/check",
            params={"permission": "invoices", "edit": "true"},
            headers=CLERK,
        )
        assert not result.json["allowed"]

    def test_check_requires_permission_param(self, client: TestClient) -> None:
        assert client.simulate_get("/v1/permissions/check", headers=CLERK).status_code == 400

    def test_check_any(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/permissions/check-any",
            json={"permissions": ["salaries.view", "vehicles"]},
            headers=CLERK,
        )
        assert result.json["allowed"]
        result = client.simulate_post(
            "/v1/permissions/check-any", json={"permissions": []}, headers=CLERK
        )
        assert not result.json["allowed"]


class TestCatalog:
    def test_forbidden_body_is_generic(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/permissions", headers=CLERK)
        assert result.status_code == 403
        assert result.json == {"error": "Not authorized"}
        assert "roles" not in result.text

    def test_admin_lists_catalog(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/permissions", headers=ADMIN)
        assert result.status_code == 200
        items = result.json["items"]
        assert len(items) == 70
        assert items[0]["key"] == "dashboard.view"

    def test_category_filter(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/permissions", params={"category": "reports"}, headers=ADMIN
        )
        assert {i["category"] for i in result.json["items"]} == {"reports"}

    def test_unknown_category(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/permissions", params={"category": "weather"}, headers=ADMIN
        )
        assert result.status_code == 400


class TestRoles:
    def test_list_roles(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/roles", headers=ADMIN)
        assert result.status_code == 200
        assert {r["key"] for r in result.json["items"]} == {"admin", "receptionist"}

    def test_create_then_duplicate(self, client: TestClient) -> None:
        body = {
            "key": "cashier",
            "name": "Cashier",
            "permission_ids": [str(permission_id_for("invoices.view"))],
        }
        result = client.simulate_post("/v1/roles", json=body, headers=ADMIN)
        assert result.status_code == 201
        assert result.json["permissions"] == ["invoices.view"]

        result = client.simulate_post("/v1/roles", json=body, headers=ADMIN)
        assert result.status_code == 409

    def test_create_with_bad_permission_id(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/roles",
            json={"key": "x", "name": "X", "permission_ids": ["not-a-uuid"]},
            headers=ADMIN,
        )
        assert result.status_code == 400

    def test_delete_admin_system_role_conflicts(self, client: TestClient, store) -> None:
        role_id = _role_id(store, "admin")
        result = client.simulate_delete(f"/v1/roles/{role_id}", headers=ADMIN)
        assert result.status_code == 409
        assert client.simulate_get(f"/v1/roles/{role_id}", headers=ADMIN).status_code == 200

    def test_get_missing_role(self, client: TestClient) -> None:
        result = client.simulate_get(
            "/v1/roles/00000000-0000-0000-0000-000000000000", headers=ADMIN
        )
        assert result.status_code == 404

    def test_patch_role(self, client: TestClient, store) -> None:
        role_id = _role_id(store, "receptionist")
        result = client.simulate_patch(
            f"/v1/roles/{role_id}", json={"name": "Front desk"}, headers=ADMIN
        )
        assert result.status_code == 200
        assert result.json["name"] == "Front desk"

    def test_replace_role_permissions_reaches_holders(self, client: TestClient, store) -> None:
        role_id = _role_id(store, "receptionist")
        result = client.simulate_put(
            f"/v1/roles/{role_id}/permissions",
            json={"permission_ids": [str(permission_id_for("dashboard.view"))]},
            headers=ADMIN,
        )
        assert result.status_code == 200
        assert result.json["added"] == []
        assert "customers.view" in result.json["removed"]
        assert result.json["affected_users"] == 1

        me = client.simulate_get("/v1/me/permissions", headers=CLERK)
        assert me.json["permissions"] == ["dashboard.view"]

    def test_assign_and_unassign(self, client: TestClient, store) -> None:
        role_id = _role_id(store, "receptionist")
        result = client.simulate_post(
            "/v1/users/new-hire/roles", json={"role_id": role_id}, headers=ADMIN
        )
        assert result.status_code == 201
        assert result.json["user_id"] == "new-hire"

        result = client.simulate_delete(f"/v1/users/new-hire/roles/{role_id}", headers=ADMIN)
        assert result.status_code == 204
        result = client.simulate_delete(f"/v1/users/new-hire/roles/{role_id}", headers=ADMIN)
        assert result.status_code == 404

    def test_clerk_cannot_manage_roles(self, client: TestClient, store) -> None:
        role_id = _role_id(store, "admin")
        result = client.simulate_post(
            "/v1/users/clerk-1/roles", json={"role_id": role_id}, headers=CLERK
        )
        assert result.status_code == 403


class TestOverrides:
    def test_grant_revoke_and_delete(self, client: TestClient) -> None:
        void_id = str(permission_id_for("invoices.void"))
        result = client.simulate_post(
            "/v1/users/clerk-1/overrides",
            json={"permission_id": void_id, "is_granted": True, "reason": "month end"},
            headers=ADMIN,
        )
        assert result.status_code == 201
        assert result.json["granted_by"] == "admin-1"

        check = client.simulate_get(
            "/v1/permissions/check", params={"permission": "invoices.void"}, headers=CLERK
        )
        assert check.json["allowed"]

        assert (
            client.simulate_delete(f"/v1/users/clerk-1/overrides/{void_id}", headers=ADMIN).status_code
            == 204
        )
        check = client.simulate_get(
            "/v1/permissions/check", params={"permission": "invoices.void"}, headers=CLERK
        )
        assert not check.json["allowed"]

    def test_past_expiry_rejected(self, client: TestClient) -> None:
        past = (datetime.now(UTC) - timedelta(days=1)).isoformat()
        result = client.simulate_post(
            "/v1/users/clerk-1/overrides",
            json={
                "permission_id": str(permission_id_for("invoices.void")),
                "is_granted": True,
                "expires_at": past,
            },
            headers=ADMIN,
        )
        assert result.status_code == 400

    def test_missing_fields(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/users/clerk-1/overrides", json={"is_granted": True}, headers=ADMIN
        )
        assert result.status_code == 400

    def test_delete_missing_override(self, client: TestClient) -> None:
        void_id = str(permission_id_for("invoices.void"))
        result = client.simulate_delete(f"/v1/users/clerk-1/overrides/{void_id}", headers=ADMIN)
        assert result.status_code == 404


class TestUserPermissions:
    def test_admin_views_user(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/users/clerk-1/permissions", headers=ADMIN)
        assert result.status_code == 200
        assert result.json["roles"] == ["receptionist"]

    def test_explain(self, client: TestClient) -> None:
        client.simulate_post(
            "/v1/users/clerk-1/overrides",
            json={"permission_id": str(permission_id_for("customers.create")), "is_granted": False},
            headers=ADMIN,
        )
        result = client.simulate_get(
            "/v1/users/clerk-1/permissions", params={"explain": "true"}, headers=ADMIN
        )
        assert result.json["sources"]["customers.create"] == "revocation"
        assert result.json["sources"]["customers.view"] == "role"

    def test_clerk_cannot_view_others(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/users/admin-1/permissions", headers=CLERK)
        assert result.status_code == 403
