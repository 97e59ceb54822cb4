from typing import List, Union
import logging
from sqlalchemy.orm import Session
from ..core.errors import NotFound, Unauthorized, ValidationError
from ..database.operations import DatabaseOperations, write_transaction
from ..models.auth import User
from ..models.organisation import OrganizationMember, Role, TeamMember

logger = logging.getLogger(__name__)

class MembershipCoordinator:
    """
    Adds and removes users at the organization and team levels.

    Every write that depends on an organization membership takes that row
    with SELECT ... FOR UPDATE, so an organization removal and a concurrent
    team add for the same user serialize. Writes that guard the last admin
    lock the admin rows first.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find_user(self, email: str) -> User:
        user = DatabaseOperations.get_user_by_email(self.db, email)
        if user is None:
            raise NotFound("USER_NOT_FOUND")
        return user

    def _ensure_admin_remains(
            self, organization_id: int, member: OrganizationMember, admins: List[OrganizationMember]
    ) -> None:
        if member.role is not Role.ADMIN:
            return
        if all(admin.id == member.id for admin in admins):
            raise ValidationError(
                "ORGANIZATION_ADMIN_REQUIRED",
                f"Organization {organization_id} must keep at least one ADMIN"
            )

    def add_organization_user(
            self, organization_id: int, email: str, role: Union[Role, str]
    ) -> OrganizationMember:
        role = Role.parse(role)
        if DatabaseOperations.get_organization(self.db, organization_id) is None:
            raise NotFound("ORGANIZATION_NOT_FOUND")
        user = self._find_user(email)

        with write_transaction(self.db, "add_organization_user"):
            # Admin rows first, in id order, then the member's own row
            admins = DatabaseOperations.lock_organization_admins(self.db, organization_id)
            existing = DatabaseOperations.get_organization_member(
                self.db, user.id, organization_id, for_update=True
            )
            if existing is not None and role is Role.MEMBER:
                self._ensure_admin_remains(organization_id, existing, admins)
            member = DatabaseOperations.save_organization_member(
                self.db, user.id, organization_id, role, existing
            )

        self.db.refresh(member)
        logger.info(f"User {user.id} is {role.value} of organization {organization_id}")
        return member

    def remove_organization_user(self, organization_id: int, user_id: int) -> None:
        with write_transaction(self.db, "remove_organization_user"):
            admins = DatabaseOperations.lock_organization_admins(self.db, organization_id)
            member = DatabaseOperations.get_organization_member(
                self.db, user_id, organization_id, for_update=True
            )
            if member is None:
                logger.info(f"User {user_id} is not in organization {organization_id}, nothing to remove")
                return
            self._ensure_admin_remains(organization_id, member, admins)
            removed_teams = DatabaseOperations.delete_organization_member(self.db, member)

        logger.info(
            f"Removed user {user_id} from organization {organization_id} "
            f"and {removed_teams} team membership(s)"
        )

    def add_team_user(
            self, organization_id: int, team_id: int, email: str, role: Union[Role, str]
    ) -> TeamMember:
        role = Role.parse(role)
        if DatabaseOperations.get_organization(self.db, organization_id) is None:
            raise NotFound("ORGANIZATION_NOT_FOUND")
        team = DatabaseOperations.get_team(self.db, team_id)
        if team is None or team.organization_id != organization_id:
            raise NotFound("TEAM_NOT_FOUND")
        user = self._find_user(email)

        with write_transaction(self.db, "add_team_user"):
            # Re-checked under lock so a concurrent organization removal cannot leave an orphan
            org_member = DatabaseOperations.get_organization_member(
                self.db, user.id, organization_id, for_update=True
            )
            if org_member is None:
                logger.warning(
                    f"Refused to add user {user.id} to team {team_id}: "
                    f"not a member of organization {organization_id}"
                )
                raise Unauthorized("ORGANIZATION_USER_REQUIRED")
            existing = DatabaseOperations.get_team_member(self.db, user.id, team_id, for_update=True)
            member = DatabaseOperations.save_team_member(self.db, user.id, team_id, role, existing)

        self.db.refresh(member)
        logger.info(f"User {user.id} is {role.value} of team {team_id}")
        return member

    def remove_team_user(self, team_id: int, user_id: int) -> None:
        with write_transaction(self.db, "remove_team_user"):
            member = DatabaseOperations.get_team_member(self.db, user_id, team_id, for_update=True)
            if member is None:
                return
            DatabaseOperations.delete_team_member(self.db, member)

        logger.info(f"Removed user {user_id} from team {team_id}")
