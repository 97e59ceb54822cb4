from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from ..core.errors import NotFound, ValidationError
from ..database.operations import DatabaseOperations, write_transaction
from ..models.organisation import Organization, Team

logger = logging.getLogger(__name__)

class HierarchyCatalog:
    """Organizations and the teams they contain"""

    def __init__(self, db: Session):
        self.db = db

    def create_organization(self, founder_id: int, name: str) -> Organization:
        """Create an organization with the founder as its first ADMIN, in one transaction"""
        name = (name or "").strip()
        if not name:
            raise ValidationError("ORGANIZATION_NAME_REQUIRED", "Organization name must not be empty")

        with write_transaction(self.db, "create_organization"):
            if DatabaseOperations.get_user(self.db, founder_id) is None:
                raise NotFound("USER_NOT_FOUND")
            org = DatabaseOperations.create_organization(self.db, name, founder_id)

        self.db.refresh(org)
        logger.info(f"Created organization {org.id} with founder {founder_id}")
        return org

    def get_organization(self, organization_id: int) -> Organization:
        org = DatabaseOperations.get_organization(self.db, organization_id)
        if org is None:
            raise NotFound("ORGANIZATION_NOT_FOUND")
        return org

    def create_team(self, organization_id: int, name: str) -> Team:
        name = (name or "").strip()
        if not name:
            raise ValidationError("TEAM_NAME_REQUIRED", "Team name must not be empty")

        with write_transaction(self.db, "create_team"):
            self.get_organization(organization_id)
            team = DatabaseOperations.create_team(self.db, organization_id, name)

        self.db.refresh(team)
        logger.info(f"Created team {team.id} in organization {organization_id}")
        return team

    def list_teams(
            self, organization_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Team]:
        return DatabaseOperations.list_organization_teams(self.db, organization_id, limit, offset)

    def get_team(self, team_id: int) -> Team:
        team = DatabaseOperations.get_team(self.db, team_id)
        if team is None:
            raise NotFound("TEAM_NOT_FOUND")
        return team

    def get_organization_team(self, organization_id: int, team_id: int) -> Team:
        """Fetch a team, treating a team of another organization as missing"""
        team = self.get_team(team_id)
        if team.organization_id != organization_id:
            raise NotFound("TEAM_NOT_FOUND")
        return team
