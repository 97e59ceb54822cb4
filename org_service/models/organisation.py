from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from ..database.base import Base
from ..core.errors import ValidationError
import enum

class Role(str, enum.Enum):
    """Membership role, ordered: ADMIN dominates MEMBER"""
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def dominates(self, other: "Role") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value) -> "Role":
        """Build a Role from its wire value; role names are case-sensitive"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("INVALID_ROLE", f"Unrecognized role: {value!r}")

_ROLE_RANK = {Role.MEMBER: 1, Role.ADMIN: 2}

class Organization(Base):
    __tablename__ = 'organizations'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    teams = relationship("Team", back_populates="organization", order_by="Team.id")

    def __repr__(self):
        return f"<Organization(id={self.id}, name={self.name})>"

class OrganizationMember(Base):
    __tablename__ = 'organization_members'
    __table_args__ = (
        UniqueConstraint('organization_id', 'user_id', name='uq_organization_member'),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    role = Column(Enum(Role, name='membership_role'), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

class Team(Base):
    __tablename__ = 'teams'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    # Teams never move between organizations
    organization_id = Column(Integer, ForeignKey('organizations.id'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    organization = relationship("Organization", back_populates="teams")

    def __repr__(self):
        return f"<Team(id={self.id}, name={self.name}, organization_id={self.organization_id})>"

class TeamMember(Base):
    __tablename__ = 'team_members'
    __table_args__ = (
        UniqueConstraint('team_id', 'user_id', name='uq_team_member'),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=False, index=True)
    role = Column(Enum(Role, name='membership_role'), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
