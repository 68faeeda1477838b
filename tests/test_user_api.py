import uuid

from stockroom.core.error_codes import BizCode
from stockroom.core.permissions.templates import permissions_for_role


def _template(role):
    return [p.to_dict() for p in permissions_for_role(role)]


def test_missing_token_is_rejected(client):
    response = client.get("/api/users/me")
    assert response.status_code == 401
    assert response.json()["code"] == 401


def test_invalid_token_is_rejected(client):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["code"] == BizCode.TOKEN_INVALID


def test_me_reports_effective_permissions(client, admin, admin_headers):
    response = client.get("/api/users/me", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 0
    assert body["data"]["user"]["username"] == "root"
    assert body["data"]["full_access"] is True
    assert body["data"]["effective_permissions"] == [{"module": "*", "action": "*", "resource": "*"}]


def test_me_normalizes_legacy_permissions(client, make_user, auth_headers):
    user = make_user("legacy", role="custom", permissions=["warehouse_view", "inventory_", "all"])
    response = client.get("/api/users/me", headers=auth_headers(user))
    data = response.json()["data"]
    assert data["user"]["permissions"] == [
        {"module": "warehouse", "action": "view", "resource": "*"},
        {"module": "*", "action": "*", "resource": "*"},
    ]
    assert data["full_access"] is True


def test_create_user_applies_role_template(client, admin_headers):
    response = client.post(
        "/api/users",
        json={"username": "wendy", "email": "wendy@example.com", "role": "Warehouse_Manager"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "warehouse_manager"
    assert data["permissions"] == _template("warehouse_manager")
    assert data["template"] == "warehouse_manager"
    assert data["is_active"] is True


def test_create_user_with_explicit_permissions(client, admin_headers):
    response = client.post(
        "/api/users",
        json={
            "username": "carl",
            "email": "carl@example.com",
            "role": "custom",
            "permissions": ["warehouse_view", {"module": "inventory", "action": "*", "resource": "transfer"}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["permissions"] == [
        {"module": "warehouse", "action": "view", "resource": "*"},
        {"module": "inventory", "action": "*", "resource": "transfer"},
    ]
    assert data["template"] == "custom"


def test_create_user_rejects_malformed_permissions(client, admin_headers):
    response = client.post(
        "/api/users",
        json={"username": "bad", "email": "bad@example.com", "permissions": ["warehouse_"]},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["code"] == BizCode.VALIDATION_FAILED


def test_create_user_rejects_unknown_role(client, admin_headers):
    response = client.post(
        "/api/users",
        json={"username": "olga", "email": "olga@example.com", "role": "owner"},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_duplicate_username(client, admin_headers, make_user):
    make_user("taken")
    response = client.post(
        "/api/users",
        json={"username": "taken", "email": "other@example.com"},
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == BizCode.DUPLICATE_NAME


def test_viewer_cannot_manage_users(client, make_user, auth_headers):
    viewer = make_user("vic")
    response = client.get("/api/users", headers=auth_headers(viewer))
    assert response.status_code == 403
    assert response.json()["code"] == BizCode.PERMISSION_DENIED


def test_user_permission_grants_access_without_admin_role(client, make_user, auth_headers):
    clerk = make_user("clerk", role="custom", permissions=["users_view"])
    response = client.get("/api/users", headers=auth_headers(clerk))
    assert response.status_code == 200
    assert {u["username"] for u in response.json()["data"]} == {"clerk"}

    response = client.post(
        "/api/users",
        json={"username": "nope", "email": "nope@example.com"},
        headers=auth_headers(clerk),
    )
    assert response.status_code == 403


def test_list_users_filters(client, admin, admin_headers, make_user):
    make_user("ivy", role="inventory_manager")
    make_user("gone", is_active=False)

    response = client.get("/api/users", headers=admin_headers)
    assert {u["username"] for u in response.json()["data"]} == {"root", "ivy"}

    response = client.get("/api/users", params={"include_inactive": True}, headers=admin_headers)
    assert {u["username"] for u in response.json()["data"]} == {"root", "ivy", "gone"}

    response = client.get("/api/users", params={"role": "INVENTORY_MANAGER"}, headers=admin_headers)
    assert [u["username"] for u in response.json()["data"]] == ["ivy"]


def test_get_user(client, admin_headers, make_user):
    user = make_user("gina")
    response = client.get(f"/api/users/{user.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["template"] == "viewer"

    response = client.get(f"/api/users/{uuid.uuid4()}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["code"] == BizCode.USER_NOT_FOUND


def test_role_change_applies_new_template(client, admin_headers, make_user):
    user = make_user("rick")
    response = client.put(
        f"/api/users/{user.id}",
        json={"role": "inventory_manager"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "inventory_manager"
    assert data["permissions"] == _template("inventory_manager")


def test_role_change_keeps_explicit_permissions(client, admin_headers, make_user):
    user = make_user("rita")
    response = client.put(
        f"/api/users/{user.id}",
        json={"role": "custom", "permissions": ["reports_export_warehouse"]},
        headers=admin_headers,
    )
    data = response.json()["data"]
    assert data["role"] == "custom"
    assert data["permissions"] == [{"module": "reports", "action": "export", "resource": "warehouse"}]


def test_profile_update_keeps_permissions(client, admin_headers, make_user):
    user = make_user("paul", role="custom", permissions=[{"module": "audit", "action": "view", "resource": "logs"}])
    response = client.put(
        f"/api/users/{user.id}",
        json={"full_name": "Paul P."},
        headers=admin_headers,
    )
    data = response.json()["data"]
    assert data["full_name"] == "Paul P."
    assert data["permissions"] == [{"module": "audit", "action": "view", "resource": "logs"}]


def test_set_permissions(client, admin_headers, make_user):
    user = make_user("sam")
    response = client.put(
        f"/api/users/{user.id}/permissions",
        json={"permissions": ["all"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["permissions"] == [{"module": "*", "action": "*", "resource": "*"}]
    assert data["template"] == "super_admin"
    # Role is untouched
    assert data["role"] == "viewer"


def test_set_permissions_rejects_wildcard_gaps(client, admin_headers, make_user):
    user = make_user("sue")
    response = client.put(
        f"/api/users/{user.id}/permissions",
        json={"permissions": [{"module": "warehouse", "action": "", "resource": "*"}]},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_cannot_deactivate_yourself(client, admin, admin_headers):
    response = client.delete(f"/api/users/{admin.id}", headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["code"] == BizCode.FORBIDDEN


def test_deactivated_user_loses_access(client, admin_headers, make_user, auth_headers):
    user = make_user("dan")
    headers = auth_headers(user)
    assert client.get("/api/users/me", headers=headers).status_code == 200

    response = client.delete(f"/api/users/{user.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False

    response = client.get("/api/users/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["code"] == BizCode.USER_INACTIVE


def test_details_editor_cannot_change_own_role(client, make_user, auth_headers):
    editor = make_user("ed", role="custom", permissions=["users_edit_details"])
    headers = auth_headers(editor)

    response = client.put(f"/api/users/{editor.id}", json={"role": "admin"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == BizCode.PERMISSION_DENIED

    response = client.put(f"/api/users/{editor.id}", json={"permissions": ["all"]}, headers=headers)
    assert response.status_code == 403

    me = client.get("/api/users/me", headers=headers).json()["data"]
    assert me["user"]["role"] == "custom"
    assert me["full_access"] is False


def test_details_editor_can_edit_profile(client, make_user, auth_headers):
    editor = make_user("edna", role="custom", permissions=["users_edit_details"])
    target = make_user("tom")

    response = client.put(
        f"/api/users/{target.id}",
        # Same role as before is not a role change
        json={"full_name": "Tom T.", "role": "viewer"},
        headers=auth_headers(editor),
    )
    assert response.status_code == 200
    assert response.json()["data"]["full_name"] == "Tom T."
    assert response.json()["data"]["role"] == "viewer"


def test_role_change_with_permission_editor_rights(client, make_user, auth_headers):
    editor = make_user("pat", role="custom", permissions=["users_edit_details", "users_edit_permissions"])
    target = make_user("tess")

    response = client.put(
        f"/api/users/{target.id}",
        json={"role": "warehouse_manager"},
        headers=auth_headers(editor),
    )
    assert response.status_code == 200
    assert response.json()["data"]["permissions"] == _template("warehouse_manager")


def test_deactivation_through_update_needs_delete_permission(client, make_user, auth_headers):
    editor = make_user("eve", role="custom", permissions=["users_edit_details"])
    target = make_user("tim")

    response = client.put(f"/api/users/{target.id}", json={"is_active": False}, headers=auth_headers(editor))
    assert response.status_code == 403
    assert response.json()["code"] == BizCode.PERMISSION_DENIED

    remover = make_user("rex", role="custom", permissions=["users_edit_details", "users_delete_list"])
    response = client.put(f"/api/users/{target.id}", json={"is_active": False}, headers=auth_headers(remover))
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False


def test_cannot_deactivate_yourself_through_update(client, admin, admin_headers):
    response = client.put(f"/api/users/{admin.id}", json={"is_active": False}, headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["code"] == BizCode.FORBIDDEN


def test_legacy_strings_are_trimmed(client, admin_headers, make_user):
    user = make_user("tina")
    response = client.put(
        f"/api/users/{user.id}/permissions",
        json={"permissions": ["warehouse_view ", " inventory_edit_items"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["permissions"] == [
        {"module": "warehouse", "action": "view", "resource": "*"},
        {"module": "inventory", "action": "edit", "resource": "items"},
    ]
