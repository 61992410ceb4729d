from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)

    supabase_id = Column(String, unique=True, index=True, nullable=True)

    profile_image_url = Column(String, nullable=True)
    active_household_id = Column(
        Integer, ForeignKey("households.id", ondelete="SET NULL"), nullable=True
    )

    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("supabase_id", name="uq_user_supabase_id"),
        UniqueConstraint("email", name="uq_user_email"),
    )

    household_memberships = relationship(
        "HouseholdMember", back_populates="user", cascade="all, delete-orphan"
    )
    active_household = relationship("Household", foreign_keys=[active_household_id])
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )

    @classmethod
    def create_from_supabase(cls, supabase_user, db_session):
        """Create a local user row from a Supabase auth user"""
        user_metadata = supabase_user.user_metadata or {}

        user = cls(
            email=supabase_user.email,
            name=user_metadata.get("name") or supabase_user.email.split("@")[0],
            supabase_id=supabase_user.id,
            profile_image_url=user_metadata.get("avatar_url"),
            is_active=True,
        )

        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    @classmethod
    def find_by_supabase_id(cls, db_session, supabase_id: str):
        return (
            db_session.query(cls)
            .filter(cls.supabase_id == supabase_id, cls.is_active == True)
            .first()
        )

    @classmethod
    def find_by_email(cls, db_session, email: str):
        """Find active user by email"""
        return (
            db_session.query(cls)
            .filter(cls.email == email, cls.is_active == True)
            .first()
        )
