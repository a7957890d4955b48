"""
User model - accounts that can sign in to the registry.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship
from app.database import Base


class User(Base):
    """
    SQLAlchemy model for the users table.

    Emails are stored lower-cased; the password is kept only as a
    salted hash.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique user identifier")
    email = Column(String(255), nullable=False, unique=True, index=True,
                   doc="Sign-in email (lower-cased)")
    password_hash = Column(String(255), nullable=False,
                           doc="Salted password hash")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="When the account was created")

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")
    students = relationship("Student", back_populates="owner")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
