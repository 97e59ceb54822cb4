from fastapi import APIRouter, Depends, Query
from typing import List
from ..dependencies import get_catalog, get_resolver, require_self
from ..models.auth import User
from ..schemas.schemas import OrganizationCreate, OrganizationResponse, UserOrganizationResponse
from ..services.catalog import HierarchyCatalog
from ..services.resolver import RoleResolver

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/{user_id}/organizations", response_model=List[UserOrganizationResponse])
async def list_user_organizations(
        limit: int = Query(0, ge=0),
        offset: int = Query(0, ge=0),
        current_user: User = Depends(require_self),
        resolver: RoleResolver = Depends(get_resolver)
):
    organizations = resolver.list_organizations_for_user(current_user.id, limit, offset)
    return [
        UserOrganizationResponse(
            id=org.id,
            name=org.name,
            created_at=org.created_at,
            role=role.value
        )
        for org, role in organizations
    ]

@router.post("/{user_id}/organizations", response_model=OrganizationResponse)
async def create_organization(
        org: OrganizationCreate,
        current_user: User = Depends(require_self),
        catalog: HierarchyCatalog = Depends(get_catalog)
):
    return catalog.create_organization(current_user.id, org.name)
