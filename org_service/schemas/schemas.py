from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

class OrganizationBase(BaseModel):
    name: str

class OrganizationCreate(OrganizationBase):
    pass

class OrganizationResponse(OrganizationBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserOrganizationResponse(OrganizationResponse):
    role: str

class OrganizationRoleResponse(BaseModel):
    organization: OrganizationResponse
    role: str

class TeamBase(BaseModel):
    name: str

class TeamCreate(TeamBase):
    pass

class TeamResponse(TeamBase):
    id: int
    organization_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OrganizationTeamResponse(BaseModel):
    organization: OrganizationResponse
    team: TeamResponse
    organization_role: str
    team_role: Optional[str] = None

class MemberCreate(BaseModel):
    email: EmailStr
    # Validated by Role.parse so unknown roles surface as INVALID_ROLE
    role: str

class MemberResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str

class MessageResponse(BaseModel):
    message: str
