from fastapi import APIRouter, Depends, Query
from typing import List
from ..dependencies import RoleContext, get_catalog, get_coordinator, get_resolver, require_organization_access
from ..schemas.schemas import (
    MemberCreate, MemberResponse, MessageResponse, OrganizationRoleResponse,
    TeamCreate, TeamResponse
)
from ..services.catalog import HierarchyCatalog
from ..services.coordinator import MembershipCoordinator
from ..services.resolver import AccessLevel, RoleResolver

router = APIRouter(prefix="/organizations", tags=["Organizations"])

organization_member = require_organization_access(AccessLevel.ORGANIZATION_MEMBER)
organization_admin = require_organization_access(AccessLevel.ORGANIZATION_ADMIN)

@router.get("/{org_id}", response_model=OrganizationRoleResponse)
async def get_organization(
        org_id: int,
        context: RoleContext = Depends(organization_member),
        catalog: HierarchyCatalog = Depends(get_catalog)
):
    organization = catalog.get_organization(org_id)
    return {
        "organization": organization,
        "role": context.organization_role.value
    }

@router.get("/{org_id}/teams", response_model=List[TeamResponse])
async def list_organization_teams(
        org_id: int,
        limit: int = Query(0, ge=0),
        offset: int = Query(0, ge=0),
        context: RoleContext = Depends(organization_member),
        catalog: HierarchyCatalog = Depends(get_catalog)
):
    return catalog.list_teams(org_id, limit, offset)

@router.post("/{org_id}/teams", response_model=TeamResponse)
async def create_organization_team(
        org_id: int,
        team: TeamCreate,
        context: RoleContext = Depends(organization_admin),
        catalog: HierarchyCatalog = Depends(get_catalog)
):
    return catalog.create_team(org_id, team.name)

@router.get("/{org_id}/users", response_model=List[MemberResponse])
async def list_organization_users(
        org_id: int,
        limit: int = Query(0, ge=0),
        offset: int = Query(0, ge=0),
        context: RoleContext = Depends(organization_member),
        resolver: RoleResolver = Depends(get_resolver)
):
    members = resolver.list_users_for_organization(org_id, limit, offset)
    return [
        MemberResponse(id=user.id, email=user.email, name=user.name, role=role.value)
        for user, role in members
    ]

@router.post("/{org_id}/users", response_model=MessageResponse)
async def add_organization_user(
        org_id: int,
        member: MemberCreate,
        context: RoleContext = Depends(organization_admin),
        coordinator: MembershipCoordinator = Depends(get_coordinator)
):
    coordinator.add_organization_user(org_id, member.email, member.role)
    return {"message": "User added to organization"}

@router.delete("/{org_id}/users/{user_id}", response_model=MessageResponse)
async def remove_organization_user(
        org_id: int,
        user_id: int,
        context: RoleContext = Depends(organization_admin),
        coordinator: MembershipCoordinator = Depends(get_coordinator)
):
    """Remove a user from the organization and from every team in it"""
    coordinator.remove_organization_user(org_id, user_id)
    return {"message": "User removed from organization"}
