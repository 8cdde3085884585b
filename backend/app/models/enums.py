"""
Profile roles enumeration.

Defines the role types for the SkillSwap marketplace.
"""

import enum


class ProfileRole(str, enum.Enum):
    """
    Profile role enumeration.

    Roles:
        USER: Regular member who teaches and learns (default role)
        ADMIN: Operator allowed to issue credit adjustments
    """
    USER = "user"
    ADMIN = "admin"
