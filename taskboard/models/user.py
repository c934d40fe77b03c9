from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from taskboard.db.base import Base

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(150), nullable=False)  # bcrypt hash
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Teams this user belongs to (any role)
    memberships = relationship("TeamMember", back_populates="user")
    # Teams this user created
    created_teams = relationship("Team", back_populates="creator")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
