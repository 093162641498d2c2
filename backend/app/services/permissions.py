# app/services/permissions.py
"""Role -> permission mapping and wildcard-aware permission checks."""
from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

# Role -> granted permissions. Roles other than admin/viewer are premium-only.
ROLE_PERMISSIONS = {
    "admin": {"*"},
    "viewer": {"reports:view"},
    "members_editor": {"members:*"},
    "giving_editor": {"giving:*", "giving_statements:*"},
    "attendance_editor": {"attendance:*"},
    "reports_viewer": {"reports:view"},
    "analytics_viewer": {"analytics:view"},
}
BASIC_PLAN_ROLES = {"admin", "viewer"}


def _perm_match(user_perm: str, required: str) -> bool:
    """Wildcard-aware permission check."""
    if user_perm == "*":
        return True
    if user_perm.endswith(":*"):
        prefix = user_perm[:-2]
        return required == prefix or required.startswith(prefix + ":")
    return user_perm == required


def has_permission(granted: Iterable[str], required: str) -> bool:
    return any(_perm_match(p, required) for p in granted)


def permissions_for_role(role: Optional[str], subscription_plan: Optional[str]) -> FrozenSet[str]:
    role = (role or "").strip().lower()
    plan = (subscription_plan or "basic").strip().lower()
    if role not in BASIC_PLAN_ROLES and plan != "premium":
        return frozenset()
    return frozenset(ROLE_PERMISSIONS.get(role, set()))
