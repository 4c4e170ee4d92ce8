from typing import Optional

PLATFORM_ROLES = ("user", "admin", "owner")


def is_owner(role: Optional[str]) -> bool:
    return role == "owner"
