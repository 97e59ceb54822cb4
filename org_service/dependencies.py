"""
FastAPI dependencies: service providers and the authorization gate.

The gate resolves the caller's roles before a route body runs. A denial
raises ``Unauthorized`` and nothing further executes; on success the route
receives the resolved roles as a ``RoleContext`` parameter.
"""

from dataclasses import dataclass
from typing import Optional
import logging
from fastapi import Depends
from sqlalchemy.orm import Session
from .auth import get_current_user
from .core.errors import Unauthorized
from .database.base import get_db
from .models.auth import User
from .models.organisation import Role
from .services.catalog import HierarchyCatalog
from .services.coordinator import MembershipCoordinator
from .services.resolver import AccessLevel, RoleResolution, RoleResolver, is_permitted

logger = logging.getLogger(__name__)

DENIAL_CODES = {
    AccessLevel.ORGANIZATION_MEMBER: "ORGANIZATION_MEMBER_ONLY",
    AccessLevel.ORGANIZATION_ADMIN: "ORGANIZATION_ADMIN_ONLY",
    AccessLevel.TEAM_MEMBER: "TEAM_MEMBER_ONLY",
    AccessLevel.TEAM_ADMIN: "TEAM_ADMIN_ONLY",
}

@dataclass(frozen=True)
class RoleContext:
    user: User
    organization_role: Optional[Role] = None
    team_role: Optional[Role] = None

def get_catalog(db: Session = Depends(get_db)) -> HierarchyCatalog:
    return HierarchyCatalog(db)

def get_resolver(db: Session = Depends(get_db)) -> RoleResolver:
    return RoleResolver(db)

def get_coordinator(db: Session = Depends(get_db)) -> MembershipCoordinator:
    return MembershipCoordinator(db)

def _admit(user: User, roles: RoleResolution, level: AccessLevel, target: str) -> RoleContext:
    if not is_permitted(roles.organization_role, roles.team_role, level):
        logger.warning(f"Denied user {user.id} {level.name} access to {target}")
        raise Unauthorized(DENIAL_CODES[level])
    return RoleContext(
        user=user,
        organization_role=roles.organization_role,
        team_role=roles.team_role
    )

def require_organization_access(level: AccessLevel):
    """Gate for routes addressed by /organizations/{org_id}"""
    async def gate(
            org_id: int,
            current_user: User = Depends(get_current_user),
            resolver: RoleResolver = Depends(get_resolver)
    ) -> RoleContext:
        roles = resolver.resolve(current_user.id, org_id)
        return _admit(current_user, roles, level, f"organization {org_id}")
    return gate

def require_team_access(level: AccessLevel):
    """Gate for routes addressed by /organizations/{org_id}/teams/{team_id}"""
    async def gate(
            org_id: int,
            team_id: int,
            current_user: User = Depends(get_current_user),
            resolver: RoleResolver = Depends(get_resolver)
    ) -> RoleContext:
        target = f"team {team_id} of organization {org_id}"
        # Callers outside the organization learn nothing about its teams
        org_roles = resolver.resolve(current_user.id, org_id)
        if org_roles.organization_role is None:
            _admit(current_user, org_roles, level, target)
        roles = resolver.resolve(current_user.id, org_id, team_id)
        return _admit(current_user, roles, level, target)
    return gate

async def require_self(user_id: int, current_user: User = Depends(get_current_user)) -> User:
    """Gate for routes addressed by /users/{user_id}: callers only act on themselves"""
    if current_user.id != user_id:
        logger.warning(f"Denied user {current_user.id} access to user {user_id}")
        raise Unauthorized("USER_SELF_ONLY")
    return current_user
