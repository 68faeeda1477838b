from itertools import permutations

import pytest

from stockroom.core.permissions import FULL_ACCESS, Permission, PermissionAction, PermissionModule, has_permission
from stockroom.core.permissions.constants import WarehouseResource
from stockroom.core.permissions.evaluator import (
    grant_matches,
    has_all_permissions,
    has_any_permission,
    query_label,
    unpack_query,
)

QUERIES = [
    ("warehouse", "edit", "items"),
    ("warehouse", "view", "inward"),
    ("inventory", "transfer", "transfer"),
    ("users", "delete", "list"),
    ("reports", "export", "employee"),
]


@pytest.mark.parametrize("query", QUERIES)
def test_full_access_grants_everything(query):
    assert has_permission({FULL_ACCESS}, *query) is True


@pytest.mark.parametrize("query", QUERIES)
def test_empty_grants_deny_everything(query):
    assert has_permission(set(), *query) is False
    assert has_permission((), *query) is False
    assert has_permission(None, *query) is False


def test_module_wildcard():
    grants = {Permission("warehouse", "*", "*")}
    assert has_permission(grants, "warehouse", "edit", "items") is True
    assert has_permission(grants, "inventory", "edit", "items") is False


def test_action_wildcard_with_resource():
    grants = {Permission("warehouse", "*", "items")}
    assert has_permission(grants, "warehouse", "delete", "items") is True
    assert has_permission(grants, "warehouse", "delete", "inward") is False
    assert has_permission(grants, "inventory", "delete", "items") is False


def test_resource_wildcard():
    grants = {Permission("warehouse", "view", "*")}
    assert has_permission(grants, "warehouse", "view", "inward") is True
    assert has_permission(grants, "warehouse", "edit", "inward") is False


def test_exact_match():
    grants = {Permission("warehouse", "edit", "items")}
    assert has_permission(grants, "warehouse", "edit", "items") is True
    assert has_permission(grants, "warehouse", "edit", "inward") is False
    assert has_permission(grants, "warehouse", "view", "items") is False


def test_wildcard_module_alone_is_not_full_access():
    # Only *:*:* spans modules
    grants = {Permission("*", "view", "*")}
    assert has_permission(grants, "warehouse", "view", "items") is False


def test_any_grant_is_enough():
    grants = [
        Permission("inventory", "view", "*"),
        Permission("warehouse", "edit", "items"),
    ]
    assert has_permission(grants, "warehouse", "edit", "items") is True
    assert has_permission(grants, "inventory", "view", "audit") is True
    assert has_permission(grants, "suppliers", "view", "list") is False


def test_enum_arguments():
    grants = {Permission(PermissionModule.WAREHOUSE, PermissionAction.CREATE, WarehouseResource.INWARD)}
    assert grants == {Permission("warehouse", "create", "inward")}
    assert has_permission(grants, PermissionModule.WAREHOUSE, PermissionAction.CREATE, WarehouseResource.INWARD)


def test_non_permission_entries_are_ignored():
    grants = ["all", {"module": "*", "action": "*", "resource": "*"}, None]
    assert has_permission(grants, "warehouse", "view", "items") is False


def test_grant_order_does_not_matter():
    grants = [
        Permission("warehouse", "view", "*"),
        Permission("inventory", "*", "transfer"),
        Permission("reports", "export", "warehouse"),
        Permission("users", "*", "*"),
    ]
    queries = QUERIES + [
        ("inventory", "approve", "transfer"),
        ("inventory", "approve", "items"),
        ("reports", "export", "warehouse"),
    ]
    expected = {q: has_permission(grants, *q) for q in queries}
    for ordering in permutations(grants):
        for query in queries:
            assert has_permission(ordering, *query) is expected[query]


def test_grant_matches_single_grant():
    assert grant_matches(FULL_ACCESS, "audit", "view", "logs")
    assert grant_matches(Permission("audit", "*", "*"), "audit", "view", "logs")
    assert not grant_matches(Permission("audit", "view", "reports"), "audit", "view", "logs")


def test_any_and_all():
    grants = [Permission("warehouse", "view", "*")]
    view = ("warehouse", "view", "items")
    edit = ("warehouse", "edit", "items")

    assert has_any_permission(grants, [edit, view]) is True
    assert has_any_permission(grants, [edit]) is False
    assert has_all_permissions(grants, [view, ("warehouse", "view", "damage")]) is True
    assert has_all_permissions(grants, [view, edit]) is False


def test_query_helpers():
    permission = Permission("warehouse", "view", "items")
    assert unpack_query(permission) == ("warehouse", "view", "items")
    assert unpack_query((PermissionModule.USERS, "edit", "list")) == ("users", "edit", "list")
    assert query_label(permission) == "warehouse:view:items"


def test_empty_query_lists():
    grants = [Permission("warehouse", "view", "*")]
    assert has_all_permissions(grants, []) is True
    assert has_any_permission(grants, []) is False


@pytest.mark.parametrize("grants", [42, object(), "all", {"module": "*", "action": "*", "resource": "*"}, FULL_ACCESS])
def test_malformed_grant_collections_deny(grants):
    assert has_permission(grants, "warehouse", "view", "items") is False
    assert has_any_permission(grants, [("warehouse", "view", "items")]) is False
    assert has_all_permissions(grants, [("warehouse", "view", "items")]) is False
