"""
Permission evaluator.

A grant matches a ``(module, action, resource)`` query when one of these holds:

1. it is the full-access grant ``*:*:*``;
2. it names the query module with ``*`` action and ``*`` resource;
3. it names the query module with ``*`` action and the query resource;
4. it names the query module and action with ``*`` resource;
5. it names the query module, action and resource exactly.

Any matching grant allows the query. The functions here are pure and never
raise; only normalized :class:`Permission` grants are considered.
"""

from collections.abc import Iterable as IterableABC, Mapping
from enum import Enum
from typing import Iterable, Sequence, Tuple, Union

from stockroom.core.permissions.constants import WILDCARD
from stockroom.core.permissions.models import Permission, as_identifier

Query = Union[Permission, Sequence[Union[str, Enum]]]


def grant_matches(grant: Permission, module: str, action: str, resource: str) -> bool:
    """Return True if a single grant covers the query."""
    if grant.is_full_access:
        return True
    if grant.module != module:
        return False
    if grant.action == WILDCARD:
        return grant.resource in (WILDCARD, resource)
    if grant.action != action:
        return False
    return grant.resource in (WILDCARD, resource)


def _as_grants(grants) -> Tuple:
    # Anything that is not a collection of grants allows nothing
    if grants is None or isinstance(grants, (str, bytes, Mapping)) or not isinstance(grants, IterableABC):
        return ()
    return tuple(grants)


def has_permission(
    grants: Iterable[Permission],
    module: Union[str, Enum],
    action: Union[str, Enum],
    resource: Union[str, Enum],
) -> bool:
    """
    Decide whether ``grants`` allow ``module``/``action``/``resource``.

    Args:
        grants: normalized grants, possibly empty; any other value denies
        module: queried module
        action: queried action
        resource: queried resource

    Returns:
        True if at least one grant matches, False otherwise
    """
    grants = _as_grants(grants)
    if not grants:
        return False

    module = as_identifier(module)
    action = as_identifier(action)
    resource = as_identifier(resource)

    return any(
        grant_matches(grant, module, action, resource)
        for grant in grants
        if isinstance(grant, Permission)
    )


def unpack_query(query: Query) -> Tuple[str, str, str]:
    """Return the (module, action, resource) strings of a query."""
    if isinstance(query, Permission):
        return query.module, query.action, query.resource
    module, action, resource = query
    return as_identifier(module), as_identifier(action), as_identifier(resource)


def query_label(query: Query) -> str:
    return ":".join(unpack_query(query))


def has_any_permission(grants: Iterable[Permission], queries: Iterable[Query]) -> bool:
    """True if ``grants`` allow at least one of ``queries``."""
    grants = _as_grants(grants)
    return any(has_permission(grants, *unpack_query(query)) for query in queries)


def has_all_permissions(grants: Iterable[Permission], queries: Iterable[Query]) -> bool:
    """True if ``grants`` allow every one of ``queries``."""
    grants = _as_grants(grants)
    return all(has_permission(grants, *unpack_query(query)) for query in queries)
