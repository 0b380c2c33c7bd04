"""
User model - identities that own reading progress and likes
"""
from sqlalchemy import Column, String, Text, Uuid
from app.database import Base
import uuid


class User(Base):
    """
    Users table - readers and admins (credentials are managed by the auth collaborator)
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(Text, unique=True, nullable=False)
    password = Column(Text, nullable=False)
    role = Column(String(20), nullable=False, default="reader")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
