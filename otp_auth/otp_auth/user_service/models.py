from sqlalchemy import Column, String, Boolean, ForeignKey, DateTime, Text, JSON
from datetime import datetime
from .db import Base
from sqlalchemy.orm import relationship
import uuid


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "user"
    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    # Uniqueness is checked by the sign-up flow, not the table
    email = Column(String(255), nullable=False, index=True)
    password = Column(String(255), nullable=False)
    phone = Column(String(255), default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class OTPCode(Base):
    __tablename__ = "otp"
    id = Column(String, primary_key=True, default=_uuid)
    email = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# Third-party account linkage. Nothing reads or writes these yet.

class Service(Base):
    __tablename__ = "services"
    id = Column(String, primary_key=True, default=_uuid)
    slug = Column(Text, unique=True, nullable=False)
    display_name = Column(Text, nullable=False)
    auth_type = Column(Text, default="oauth2", nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    accounts = relationship("Account", back_populates="service", cascade="all, delete-orphan")


class Account(Base):
    __tablename__ = "accounts"
    id = Column(String, primary_key=True, default=_uuid)
    user_id = Column(String, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(String, ForeignKey("services.id", ondelete="CASCADE"), nullable=False)
    # Account id on the provider side (e.g. channel id)
    provider_account_id = Column(Text, nullable=False)
    username = Column(Text, nullable=True)
    display_name = Column(Text, nullable=True)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    scopes = Column(JSON, nullable=True)
    account_metadata = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="accounts")
    service = relationship("Service", back_populates="accounts")
