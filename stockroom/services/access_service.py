from typing import Dict, List

from stockroom.core.error_codes import BizCode
from stockroom.core.exceptions import ResourceNotFoundException
from stockroom.core.logging_config import get_business_logger
from stockroom.core.permissions import FULL_ACCESS, Subject, permission_service
from stockroom.core.permissions.catalog import get_all_permissions
from stockroom.core.permissions.templates import ROLE_PERMISSIONS, RoleTemplate, get_template
from stockroom.models.user_model import User
from stockroom.schemas.permission_schema import CheckMode, PermissionQuery

business_logger = get_business_logger()


def _title(template: RoleTemplate) -> str:
    return " ".join(word.capitalize() for word in template.value.split("_"))


def describe_template(template: RoleTemplate) -> Dict:
    name = _title(template)
    return {
        "id": template.value,
        "name": name,
        "description": f"Standard permissions for {name} role",
        "permissions": [p.to_dict() for p in ROLE_PERMISSIONS[template]],
        "is_default": template is not RoleTemplate.CUSTOM,
    }


def list_templates() -> List[Dict]:
    return [describe_template(template) for template in RoleTemplate]


def get_template_detail(name: str) -> Dict:
    template = get_template(name)
    if template is None:
        raise ResourceNotFoundException("Permission template", name, code=BizCode.TEMPLATE_NOT_FOUND)
    return describe_template(template)


def get_catalog(include_full_access: bool = True) -> List[Dict]:
    return [entry.to_dict() for entry in get_all_permissions(include_full_access=include_full_access)]


def check_permissions(subject: Subject, queries: List[PermissionQuery], mode: CheckMode) -> Dict:
    """Evaluate each query for ``subject`` and combine the results with ``mode``."""
    results = [
        {
            **query.model_dump(),
            "allowed": permission_service.can_perform(subject, query.module, query.action, query.resource),
        }
        for query in queries
    ]
    combine = any if mode is CheckMode.ANY else all
    allowed = combine(r["allowed"] for r in results)

    business_logger.debug(f"Permission check: subject_id={subject.id}, mode={mode.value}, allowed={allowed}")
    return {"allowed": allowed, "mode": mode.value, "results": results}


def describe_access(user: User) -> Dict:
    """The user's effective grants, after role expansion."""
    grants = permission_service.resolve_grants(Subject.from_user(user))
    return {
        "effective_permissions": [p.to_dict() for p in grants],
        "full_access": FULL_ACCESS in grants,
    }
