from sqlalchemy import Column, String, Text, TIMESTAMP
from sqlalchemy.orm import relationship, validates
from core.db import Base, new_id, utcnow

class User(Base):
    """Dashboard user; credentials are managed by the auth service"""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id, comment="Opaque user ID")
    email = Column(String(320), unique=True, nullable=False, comment="Login email (lower-case)")
    name = Column(Text, nullable=False, comment="Display name")
    password_hash = Column(Text, nullable=False, comment="Credential hash written by the auth service")
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow,
                        comment="Registration time (UTC)")

    videos = relationship("Video", back_populates="owner", cascade="all, delete-orphan",
                          passive_deletes=True)

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value
