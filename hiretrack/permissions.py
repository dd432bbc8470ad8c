from __future__ import annotations

from hiretrack.models import UserRole

_CRUD = frozenset({"read", "create", "update", "delete"})

PERMISSIONS: dict[str, dict[str, frozenset[str]]] = {
    UserRole.RECRUITER.value: {
        "candidates": _CRUD | {"import", "export"},
        "interviews": _CRUD,
        "notes": _CRUD,
        "reports": frozenset({"read"}),
        "users": frozenset({"read", "update"}),
    },
    UserRole.HIRING_MANAGER.value: {
        "candidates": frozenset({"read", "create", "update", "import", "export"}),
        "interviews": frozenset({"read", "create", "update"}),
        "notes": frozenset({"read", "create", "update"}),
        "reports": frozenset({"read"}),
    },
    UserRole.INTERVIEWER.value: {
        "candidates": frozenset({"read", "create", "update"}),
        "interviews": frozenset({"read", "update"}),
        "notes": frozenset({"read", "create", "update"}),
        "reports": frozenset({"read"}),
    },
    UserRole.VIEWER.value: {
        "candidates": frozenset({"read"}),
        "interviews": frozenset({"read"}),
        "notes": frozenset({"read"}),
        "reports": frozenset({"read"}),
    },
}

USER_ADMIN_ROLES = [UserRole.RECRUITER.value]
USER_READ_ROLES = [UserRole.RECRUITER.value, UserRole.HIRING_MANAGER.value]


def has_permission(role: str, action: str, resource: str) -> bool:
    resources = PERMISSIONS.get(str(role or "").upper().strip())
    if not resources or not resource:
        return False
    return action in resources.get(resource, frozenset())
