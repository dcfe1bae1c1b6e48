# secretaria/core/authorization.py
"""Role-based access policy.

Every protected route is named ``"<resource>:<action>"``. Routers attach
``enforce_policy`` once; it looks the pair up in ``POLICY`` for the caller's
role, so individual endpoints never check roles themselves.
"""
import logging
from typing import Dict, FrozenSet, Tuple

from fastapi import Depends, Request

from .auth import get_current_user
from .exceptions import PermissionDenied
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)

ADMIN = UserRole.ADMIN
TEACHER = UserRole.TEACHER
STUDENT = UserRole.STUDENT

POLICY: Dict[Tuple[str, str], FrozenSet[UserRole]] = {
    ("enrollments", "list"): frozenset({ADMIN}),
    ("enrollments", "create"): frozenset({ADMIN}),
    ("enrollments", "read"): frozenset({ADMIN}),
    ("enrollments", "mine"): frozenset({STUDENT}),
    ("enrollments", "update_status"): frozenset({ADMIN}),
    ("enrollments", "update_semester"): frozenset({ADMIN}),
    ("enrollments", "delete"): frozenset({ADMIN}),
    ("enrollments", "pending_documents"): frozenset({ADMIN}),
    ("reenrollments", "process_all"): frozenset({ADMIN}),
    ("reenrollments", "preview_contract"): frozenset({STUDENT}),
    ("reenrollments", "accept"): frozenset({STUDENT}),
    ("contracts", "list"): frozenset({ADMIN}),
    ("contracts", "mine"): frozenset({STUDENT, TEACHER}),
    ("contracts", "read"): frozenset({ADMIN, STUDENT, TEACHER}),
    ("contracts", "accept"): frozenset({STUDENT, TEACHER}),
    ("contract_templates", "list"): frozenset({ADMIN}),
    ("contract_templates", "placeholders"): frozenset({ADMIN}),
}


def is_allowed(role: UserRole, resource: str, action: str) -> bool:
    """Unknown (resource, action) pairs are denied."""
    return role in POLICY.get((resource, action), frozenset())


def _route_permission(request: Request) -> Tuple[str, str]:
    route = request.scope.get("route")
    name = getattr(route, "name", "") or ""
    resource, _, action = name.partition(":")
    return resource, action


async def enforce_policy(request: Request, current_user: User = Depends(get_current_user)) -> User:
    resource, action = _route_permission(request)
    if not is_allowed(current_user.role, resource, action):
        logger.warning(
            f"Access denied - user {current_user.id} ({current_user.role.value}) "
            f"on {resource}:{action} {request.method} {request.url.path}"
        )
        raise PermissionDenied()
    return current_user
