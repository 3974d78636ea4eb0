"""User model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from warden.database import Base


class User(Base):
    """Registered identity or pending invite placeholder."""

    __tablename__ = "user"

    # Assigned by the identity allocator, never by the database.
    id = Column(Integer, primary_key=True, autoincrement=False)
    username = Column(String(256), unique=True, nullable=True, index=True)
    first_name = Column(String(256), nullable=True)
    last_name = Column(String(256), nullable=True)
    email = Column(String(256), nullable=True, index=True)
    password_hash = Column(String(256), nullable=True)
    invite_code = Column(String(64), nullable=True)
    recovery_code_hash = Column(String(256), nullable=True)
    resetting_code_hash = Column(String(256), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
