import pytest

from stockroom.core.permissions import FULL_ACCESS, Permission, has_permission
from stockroom.core.permissions.models import Subject
from stockroom.core.permissions.normalization import (
    normalize_permission,
    normalize_permissions,
    parse_legacy_permission,
)


@pytest.mark.parametrize("raw, expected", [
    ("all", FULL_ACCESS),
    ("warehouse_view", Permission("warehouse", "view", "*")),
    ("warehouse_edit_items", Permission("warehouse", "edit", "items")),
    ("warehouse_view_closing_stock", Permission("warehouse", "view", "closing_stock")),
    ("viewer", Permission("viewer", "view", "*")),
])
def test_legacy_strings(raw, expected):
    assert parse_legacy_permission(raw) == expected
    assert normalize_permission(raw) == expected


@pytest.mark.parametrize("raw", ["", "warehouse_", "_view", "a__b", "warehouse_edit_"])
def test_malformed_legacy_strings(raw):
    assert normalize_permission(raw) is None


def test_tuple_passes_through_unchanged():
    permission = Permission("inventory", "*", "transfer")
    assert normalize_permission(permission) is permission


def test_mapping_and_sequence_entries():
    assert normalize_permission({"module": "suppliers", "action": "view", "resource": "list"}) == \
        Permission("suppliers", "view", "list")
    assert normalize_permission(("suppliers", "*", "*")) == Permission("suppliers", "*", "*")
    assert normalize_permission(["suppliers", "view", "list"]) == Permission("suppliers", "view", "list")


@pytest.mark.parametrize("raw", [
    None,
    42,
    {"module": "suppliers", "action": "view"},
    {"module": "", "action": "view", "resource": "*"},
    ("suppliers", "view"),
    ("suppliers", "view", None),
])
def test_malformed_entries(raw):
    assert normalize_permission(raw) is None


def test_normalize_list_drops_malformed_and_duplicates():
    entries = [
        "warehouse_view",
        {"module": "warehouse", "action": "view", "resource": "*"},
        "warehouse_",
        None,
        "all",
    ]
    assert normalize_permissions(entries) == (
        Permission("warehouse", "view", "*"),
        FULL_ACCESS,
    )


@pytest.mark.parametrize("raw", [None, "warehouse_view", {"module": "a"}, 5])
def test_normalize_non_list(raw):
    assert normalize_permissions(raw) == ()


def test_normalization_is_idempotent():
    entries = ["all", "inventory_view", {"module": "users", "action": "edit", "resource": "list"}]
    once = normalize_permissions(entries)
    assert normalize_permissions(once) == once
    assert normalize_permissions([p.to_dict() for p in once]) == once


def test_malformed_entries_never_match():
    grants = normalize_permissions(["warehouse_", "", {"module": "*"}])
    assert grants == ()
    assert has_permission(grants, "warehouse", "view", "items") is False


class _StoredUser:
    def __init__(self, role, permissions):
        self.id = "u-1"
        self.role = role
        self.permissions = permissions


def test_subject_from_user_normalizes_stored_permissions():
    subject = Subject.from_user(_StoredUser("viewer", ["warehouse_view", "bogus_"]))
    assert subject.id == "u-1"
    assert subject.role == "viewer"
    assert subject.permissions == (Permission("warehouse", "view", "*"),)


def test_permission_rejects_empty_fields():
    with pytest.raises(ValueError):
        Permission("warehouse", "", "*")
    assert str(Permission("warehouse", "view", "*")) == "warehouse:view:*"
