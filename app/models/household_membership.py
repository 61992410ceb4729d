from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.sql import func
from ..database import Base
from sqlalchemy import Index
from sqlalchemy.orm import relationship
from .enums import HouseholdRole


class HouseholdMember(Base):
    __tablename__ = "household_members"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    household_id = Column(
        Integer, ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )

    role = Column(String, default=HouseholdRole.MEMBER.value, nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    left_at = Column(DateTime(timezone=True), nullable=True)

    # Invitation lifecycle
    is_invited = Column(Boolean, default=False)
    is_accepted = Column(Boolean, default=False)
    is_rejected = Column(Boolean, default=False)
    is_selected = Column(Boolean, default=False)

    last_assigned_chore_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="household_memberships")
    household = relationship("Household", back_populates="members")
    threads = relationship(
        "Thread", secondary="thread_participants", back_populates="participants"
    )

    __table_args__ = (
        Index("idx_unique_household_member", "user_id", "household_id", unique=True),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == HouseholdRole.ADMIN.value
