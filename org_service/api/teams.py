from fastapi import APIRouter, Depends, Query
from typing import List
from ..dependencies import RoleContext, get_catalog, get_coordinator, get_resolver, require_team_access
from ..schemas.schemas import MemberCreate, MemberResponse, MessageResponse, OrganizationTeamResponse
from ..services.catalog import HierarchyCatalog
from ..services.coordinator import MembershipCoordinator
from ..services.resolver import AccessLevel, RoleResolver

router = APIRouter(prefix="/organizations/{org_id}/teams", tags=["Teams"])

team_member = require_team_access(AccessLevel.TEAM_MEMBER)
team_admin = require_team_access(AccessLevel.TEAM_ADMIN)

@router.get("/{team_id}", response_model=OrganizationTeamResponse)
async def get_organization_team(
        org_id: int,
        team_id: int,
        context: RoleContext = Depends(team_member),
        catalog: HierarchyCatalog = Depends(get_catalog)
):
    """Team with the caller's role at both the organization and team level"""
    return {
        "organization": catalog.get_organization(org_id),
        "team": catalog.get_organization_team(org_id, team_id),
        "organization_role": context.organization_role.value,
        "team_role": context.team_role.value if context.team_role else None
    }

@router.get("/{team_id}/users", response_model=List[MemberResponse])
async def list_team_users(
        org_id: int,
        team_id: int,
        limit: int = Query(0, ge=0),
        offset: int = Query(0, ge=0),
        context: RoleContext = Depends(team_member),
        resolver: RoleResolver = Depends(get_resolver)
):
    members = resolver.list_users_for_team(team_id, limit, offset)
    return [
        MemberResponse(id=user.id, email=user.email, name=user.name, role=role.value)
        for user, role in members
    ]

@router.post("/{team_id}/users", response_model=MessageResponse)
async def add_team_user(
        org_id: int,
        team_id: int,
        member: MemberCreate,
        context: RoleContext = Depends(team_admin),
        coordinator: MembershipCoordinator = Depends(get_coordinator)
):
    """Add a user to the team; they must already belong to the organization"""
    coordinator.add_team_user(org_id, team_id, member.email, member.role)
    return {"message": "User added to team"}

@router.delete("/{team_id}/users/{user_id}", response_model=MessageResponse)
async def remove_team_user(
        org_id: int,
        team_id: int,
        user_id: int,
        context: RoleContext = Depends(team_admin),
        coordinator: MembershipCoordinator = Depends(get_coordinator)
):
    coordinator.remove_team_user(team_id, user_id)
    return {"message": "User removed from team"}
