"""
AuthSession model - server-side sessions behind the browser cookie.

The browser holds an opaque token; only its SHA-256 digest is stored.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from app.database import Base


class AuthSession(Base):
    """SQLAlchemy model for the auth_sessions table."""
    __tablename__ = "auth_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique session identifier")
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True,
                     doc="User this session authenticates")
    token_hash = Column(String(64), nullable=False, unique=True, index=True,
                        doc="SHA-256 hex digest of the session token")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="When the user signed in")
    expires_at = Column(DateTime, nullable=False,
                        doc="After this instant the session is treated as absent")

    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<AuthSession(id={self.id}, user={self.user_id}, expires_at={self.expires_at})>"
