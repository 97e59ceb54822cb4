from sqlalchemy import Column, Integer, String, DateTime, func
from ..database.base import Base

class User(Base):
    """Read-only view of the identity subsystem's users; emails are stored lower case"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
