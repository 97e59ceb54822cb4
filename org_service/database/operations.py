from contextlib import contextmanager
from sqlalchemy.orm import Session, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import and_, func, select
from ..core.errors import MembershipError, ConflictInternal
from ..models.auth import User
from ..models.organisation import Organization, OrganizationMember, Team, TeamMember, Role
from typing import Optional, List, Tuple
import logging

logger = logging.getLogger(__name__)

def normalize_email(email: str) -> str:
    return email.strip().lower()

def paginate(query: Query, limit: Optional[int] = None, offset: Optional[int] = None) -> Query:
    """Apply limit/offset; a missing or non-positive limit means no limit"""
    if offset:
        query = query.offset(offset)
    if limit and limit > 0:
        query = query.limit(limit)
    return query

@contextmanager
def write_transaction(db: Session, operation: str):
    """
    Commit everything done inside the block as one transaction.

    Domain errors roll back and propagate unchanged; storage errors roll
    back and surface as ConflictInternal.
    """
    try:
        yield
        db.commit()
    except MembershipError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"{operation} failed: {e}")
        raise ConflictInternal("MEMBERSHIP_WRITE_FAILED", f"{operation} failed") from e

class DatabaseOperations:
    """
    Data access for the catalog and the membership ledger.

    Write helpers only flush; callers own the transaction through
    write_transaction so multi-step writes commit together.
    """

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[User]:
        return db.get(User, user_id)

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()

    @staticmethod
    def create_organization(db: Session, name: str, founder_id: int) -> Organization:
        org = Organization(name=name)
        db.add(org)
        db.flush()
        db.add(OrganizationMember(
            user_id=founder_id,
            organization_id=org.id,
            role=Role.ADMIN
        ))
        db.flush()
        return org

    @staticmethod
    def get_organization(db: Session, organization_id: int) -> Optional[Organization]:
        return db.get(Organization, organization_id)

    @staticmethod
    def create_team(db: Session, organization_id: int, name: str) -> Team:
        team = Team(
            name=name,
            organization_id=organization_id
        )
        db.add(team)
        db.flush()
        return team

    @staticmethod
    def get_team(db: Session, team_id: int) -> Optional[Team]:
        return db.get(Team, team_id)

    @staticmethod
    def list_organization_teams(
            db: Session, organization_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Team]:
        query = db.query(Team).filter(
            Team.organization_id == organization_id
        ).order_by(Team.id.asc())
        return paginate(query, limit, offset).all()

    @staticmethod
    def get_organization_member(
            db: Session, user_id: int, organization_id: int, for_update: bool = False
    ) -> Optional[OrganizationMember]:
        query = db.query(OrganizationMember).filter(
            and_(
                OrganizationMember.user_id == user_id,
                OrganizationMember.organization_id == organization_id
            )
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_team_member(
            db: Session, user_id: int, team_id: int, for_update: bool = False
    ) -> Optional[TeamMember]:
        query = db.query(TeamMember).filter(
            and_(
                TeamMember.user_id == user_id,
                TeamMember.team_id == team_id
            )
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def lock_organization_admins(db: Session, organization_id: int) -> List[OrganizationMember]:
        return db.query(OrganizationMember).filter(
            and_(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.role == Role.ADMIN
            )
        ).order_by(OrganizationMember.id.asc()).with_for_update().all()

    @staticmethod
    def save_organization_member(
            db: Session, user_id: int, organization_id: int, role: Role,
            existing: Optional[OrganizationMember] = None
    ) -> OrganizationMember:
        if existing is not None:
            existing.role = role
            member = existing
        else:
            member = OrganizationMember(
                user_id=user_id,
                organization_id=organization_id,
                role=role
            )
            db.add(member)
        db.flush()
        return member

    @staticmethod
    def delete_organization_member(db: Session, member: OrganizationMember) -> int:
        """Delete the membership and every team membership under the same organization"""
        team_ids = select(Team.id).where(Team.organization_id == member.organization_id)
        removed_teams = db.query(TeamMember).filter(
            and_(
                TeamMember.user_id == member.user_id,
                TeamMember.team_id.in_(team_ids)
            )
        ).delete(synchronize_session="fetch")
        db.delete(member)
        db.flush()
        return removed_teams

    @staticmethod
    def save_team_member(
            db: Session, user_id: int, team_id: int, role: Role,
            existing: Optional[TeamMember] = None
    ) -> TeamMember:
        if existing is not None:
            existing.role = role
            member = existing
        else:
            member = TeamMember(
                user_id=user_id,
                team_id=team_id,
                role=role
            )
            db.add(member)
        db.flush()
        return member

    @staticmethod
    def delete_team_member(db: Session, member: TeamMember) -> None:
        db.delete(member)
        db.flush()

    @staticmethod
    def list_user_organizations(
            db: Session, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Tuple[Organization, Role]]:
        query = db.query(Organization, OrganizationMember.role).join(
            OrganizationMember, OrganizationMember.organization_id == Organization.id
        ).filter(
            OrganizationMember.user_id == user_id
        ).order_by(Organization.id.asc())
        return [(org, role) for org, role in paginate(query, limit, offset).all()]

    @staticmethod
    def list_organization_users(
            db: Session, organization_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Tuple[User, Role]]:
        query = db.query(User, OrganizationMember.role).join(
            OrganizationMember, OrganizationMember.user_id == User.id
        ).filter(
            OrganizationMember.organization_id == organization_id
        ).order_by(OrganizationMember.id.asc())
        return [(user, role) for user, role in paginate(query, limit, offset).all()]

    @staticmethod
    def list_team_users(
            db: Session, team_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Tuple[User, Role]]:
        query = db.query(User, TeamMember.role).join(
            TeamMember, TeamMember.user_id == User.id
        ).filter(
            TeamMember.team_id == team_id
        ).order_by(TeamMember.id.asc())
        return [(user, role) for user, role in paginate(query, limit, offset).all()]
