# Authentication module

from alumni_api.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_optional_user,
    require_roles,
    ensure_owner_or_admin,
    is_owner_or_admin,
)

__all__ = [
    "get_current_user",
    "get_current_admin",
    "get_optional_user",
    "require_roles",
    "ensure_owner_or_admin",
    "is_owner_or_admin",
]
