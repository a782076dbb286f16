from enum import Enum


class Role(str, Enum):
    """Enumerates every operator role recognised by the platform.

    Using an Enum avoids typos when referring to roles across the code-base
    while still being JSON-serialisable (inherits from *str*).
    """

    agent = "agent"
    admin = "admin"


# Higher index = higher privilege
ROLE_ORDER = [Role.agent.value, Role.admin.value]


def role_satisfies(user_role: "str | None", required: "str | Role") -> bool:
    """True when *user_role* ranks at or above *required*."""
    user_role = (user_role or "").lower()
    required = required.value if isinstance(required, Role) else str(required).lower()
    if user_role not in ROLE_ORDER or required not in ROLE_ORDER:
        return False
    return ROLE_ORDER.index(user_role) >= ROLE_ORDER.index(required)
