import uuid

import pytest

from stockroom.core.error_codes import BizCode
from stockroom.core.exceptions import AuthorizationException, PermissionDeniedException
from stockroom.core.permissions import (
    FULL_ACCESS,
    Permission,
    PermissionService,
    Subject,
    UserRole,
    permission_service,
)
from stockroom.core.permissions.templates import permissions_for_role
from stockroom.schemas.permission_schema import CheckMode, PermissionQuery
from stockroom.services import access_service


@pytest.fixture
def service():
    return PermissionService(
        all_access_roles=["admin"],
        default_allowed_roles=["admin", "warehouse_manager", "inventory_manager", "viewer"],
    )


def _subject(role, permissions=()):
    return Subject(id=uuid.uuid4(), role=role, permissions=tuple(permissions))


def test_admin_role_resolves_to_full_access(service):
    admin = _subject("ADMIN")
    assert service.resolve_grants(admin) == (FULL_ACCESS,)
    assert service.can_perform(admin, "users", "delete", "list")


def test_other_roles_use_their_grants(service):
    viewer = _subject("viewer", permissions_for_role("viewer"))
    assert service.resolve_grants(viewer) == permissions_for_role("viewer")
    assert service.can_perform(viewer, "warehouse", "view", "items")
    assert not service.can_perform(viewer, "warehouse", "edit", "items")


def test_user_role_is_not_all_access_by_default(service):
    assert not service.can_perform(_subject("user"), "warehouse", "view", "items")


def test_user_role_all_access_is_opt_in():
    service = PermissionService(all_access_roles=["admin", "user"])
    assert service.can_perform(_subject("USER"), "warehouse", "delete", "items")


def test_stored_full_access_grant_works_for_any_role(service):
    assert service.can_perform(_subject("custom", [FULL_ACCESS]), "audit", "export", "logs")


def test_any_and_all(service):
    subject = _subject("custom", [Permission("warehouse", "view", "*")])
    queries = [("warehouse", "view", "items"), ("warehouse", "edit", "items")]
    assert service.can_perform_any(subject, queries)
    assert not service.can_perform_all(subject, queries)
    assert service.can_perform_all(_subject("admin"), queries)


def test_require_permission(service):
    subject = _subject("custom", [Permission("warehouse", "view", "*")])
    service.require_permission(subject, "warehouse", "view", "inward")

    with pytest.raises(PermissionDeniedException) as exc_info:
        service.require_permission(subject, "warehouse", "edit", "inward")
    assert exc_info.value.code == BizCode.PERMISSION_DENIED
    assert exc_info.value.context["required"] == "warehouse:edit:inward"

    with pytest.raises(PermissionDeniedException) as exc_info:
        service.require_permission(subject, "users", "view", "list", error_message="No user access")
    assert exc_info.value.message == "No user access"


def test_default_allow_list(service):
    assert service.is_role_allowed(_subject("Viewer"))
    assert service.is_role_allowed(_subject(UserRole.WAREHOUSE_MANAGER))
    assert not service.is_role_allowed(_subject("supplier_manager"))
    assert not service.is_role_allowed(_subject("custom"))


def test_explicit_allow_list(service):
    assert service.is_role_allowed(_subject("warehouse_manager"), ["ADMIN", "WAREHOUSE_MANAGER"])
    assert not service.is_role_allowed(_subject("viewer"), ["admin"])


def test_full_access_passes_any_allow_list(service):
    assert service.is_role_allowed(_subject("admin"), ["viewer"])
    assert service.is_role_allowed(_subject("custom", [FULL_ACCESS]), [])


def test_require_role(service):
    service.require_role(_subject("viewer"))
    with pytest.raises(AuthorizationException) as exc_info:
        service.require_role(_subject("viewer"), ["admin"])
    assert exc_info.value.code == BizCode.ROLE_NOT_ALLOWED


def test_check_evaluates_each_query_once(monkeypatch):
    calls = []
    original = permission_service.can_perform

    def counting(subject, module, action, resource):
        calls.append((module, action, resource))
        return original(subject, module, action, resource)

    monkeypatch.setattr(permission_service, "can_perform", counting)

    subject = _subject("custom", [Permission("warehouse", "view", "*")])
    queries = [
        PermissionQuery(module="warehouse", action="view", resource="items"),
        PermissionQuery(module="warehouse", action="edit", resource="items"),
    ]

    result = access_service.check_permissions(subject, queries, CheckMode.ANY)
    assert result["allowed"] is True
    assert [r["allowed"] for r in result["results"]] == [True, False]
    assert len(calls) == 2

    calls.clear()
    result = access_service.check_permissions(subject, queries, CheckMode.ALL)
    assert result["allowed"] is False
    assert len(calls) == 2
