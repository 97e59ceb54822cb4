from .auth import User
from .organisation import Role, Organization, OrganizationMember, Team, TeamMember

__all__ = [
    "User",
    "Role",
    "Organization",
    "OrganizationMember",
    "Team",
    "TeamMember",
]
