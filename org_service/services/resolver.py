"""
Role resolution and the authorization decision.

``RoleResolver`` only gathers facts: which role, if any, a user holds on an
organization and on one of its teams. ``is_permitted`` turns those facts
into an allow/deny answer for an ``AccessLevel``. Keeping the two apart lets
informational routes report a caller's roles without denying anything.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import enum
from sqlalchemy.orm import Session
from ..core.errors import NotFound, ValidationError
from ..database.operations import DatabaseOperations
from ..models.auth import User
from ..models.organisation import Organization, Role


class Scope(str, enum.Enum):
    ORGANIZATION = "organization"
    TEAM = "team"


class AccessLevel(enum.Enum):
    """Minimum standing an operation requires, and at which level"""
    ORGANIZATION_MEMBER = (Scope.ORGANIZATION, Role.MEMBER)
    ORGANIZATION_ADMIN = (Scope.ORGANIZATION, Role.ADMIN)
    TEAM_MEMBER = (Scope.TEAM, Role.MEMBER)
    TEAM_ADMIN = (Scope.TEAM, Role.ADMIN)

    @property
    def scope(self) -> Scope:
        return self.value[0]

    @property
    def minimum(self) -> Role:
        return self.value[1]


@dataclass(frozen=True)
class RoleResolution:
    organization_role: Optional[Role] = None
    team_role: Optional[Role] = None


def is_permitted(
        organization_role: Optional[Role], team_role: Optional[Role], level: AccessLevel
) -> bool:
    # A team role without an organization role grants nothing
    if organization_role is None:
        return False
    if level.scope is Scope.ORGANIZATION:
        return organization_role.dominates(level.minimum)
    # Organization admins govern every team beneath them
    if organization_role is Role.ADMIN:
        return True
    return team_role is not None and team_role.dominates(level.minimum)


class RoleResolver:
    def __init__(self, db: Session):
        self.db = db

    def organization_role(self, user_id: int, organization_id: int) -> Optional[Role]:
        member = DatabaseOperations.get_organization_member(self.db, user_id, organization_id)
        return member.role if member else None

    def team_role(self, user_id: int, team_id: int) -> Optional[Role]:
        member = DatabaseOperations.get_team_member(self.db, user_id, team_id)
        return member.role if member else None

    def resolve(
            self, user_id: int, organization_id: int, team_id: Optional[int] = None
    ) -> RoleResolution:
        """
        Report the user's roles on the organization and, optionally, one of
        its teams. A level without membership is reported as None.
        """
        team_role = None
        if team_id is not None:
            team = DatabaseOperations.get_team(self.db, team_id)
            if team is None:
                raise NotFound("TEAM_NOT_FOUND")
            if team.organization_id != organization_id:
                raise ValidationError(
                    "TEAM_ORGANIZATION_MISMATCH",
                    f"Team {team_id} does not belong to organization {organization_id}"
                )
            team_role = self.team_role(user_id, team_id)

        return RoleResolution(
            organization_role=self.organization_role(user_id, organization_id),
            team_role=team_role
        )

    def list_organizations_for_user(
            self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Tuple[Organization, Role]]:
        return DatabaseOperations.list_user_organizations(self.db, user_id, limit, offset)

    def list_users_for_organization(
            self, organization_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Tuple[User, Role]]:
        return DatabaseOperations.list_organization_users(self.db, organization_id, limit, offset)

    def list_users_for_team(
            self, team_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Tuple[User, Role]]:
        return DatabaseOperations.list_team_users(self.db, team_id, limit, offset)
