from algoshield.models.role import Group, Role, group_roles, user_groups, user_roles
from algoshield.models.user import User

__all__ = [
    "Group",
    "Role",
    "User",
    "group_roles",
    "user_groups",
    "user_roles",
]
