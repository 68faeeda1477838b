"""Management API, authenticated with JWT bearer tokens.

Mounted under /api.
"""
from fastapi import APIRouter
from . import (
    audit_controller,
    permission_controller,
    user_controller,
)

manager_router = APIRouter()

manager_router.include_router(user_controller.router)
manager_router.include_router(permission_controller.router)
manager_router.include_router(audit_controller.router)

__all__ = ["manager_router"]
