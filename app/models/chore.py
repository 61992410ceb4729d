from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import ChoreStatus, ChorePriority, SubtaskStatus, ChoreSwapRequestStatus


class Chore(Base):
    __tablename__ = "chores"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    priority = Column(String, default=ChorePriority.MEDIUM.value)
    status = Column(String, default=ChoreStatus.PENDING.value, nullable=False)

    household_id = Column(
        Integer, ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )
    recurrence_rule_id = Column(
        Integer, ForeignKey("recurrence_rules.id", ondelete="SET NULL"), nullable=True
    )

    due_date = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    household = relationship("Household", back_populates="chores")
    recurrence_rule = relationship("RecurrenceRule")
    assignments = relationship(
        "ChoreAssignment", back_populates="chore", cascade="all, delete-orphan"
    )
    subtasks = relationship(
        "Subtask",
        back_populates="chore",
        cascade="all, delete-orphan",
        order_by="Subtask.id",
    )
    history = relationship(
        "ChoreHistory", back_populates="chore", order_by="ChoreHistory.id"
    )
    swap_requests = relationship("ChoreSwapRequest", back_populates="chore")
    events = relationship("Event", back_populates="chore")

    __table_args__ = (
        Index("idx_chore_household_status_due", "household_id", "status", "due_date"),
    )

    @property
    def assigned_user_ids(self):
        return [a.user_id for a in self.assignments]


class ChoreAssignment(Base):
    __tablename__ = "chore_assignments"

    id = Column(Integer, primary_key=True, index=True)
    chore_id = Column(
        Integer, ForeignKey("chores.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    chore = relationship("Chore", back_populates="assignments")
    user = relationship("User")

    __table_args__ = (
        Index("idx_unique_chore_assignment", "chore_id", "user_id", unique=True),
    )


class Subtask(Base):
    __tablename__ = "subtasks"

    id = Column(Integer, primary_key=True, index=True)
    chore_id = Column(
        Integer, ForeignKey("chores.id", ondelete="CASCADE"), nullable=False
    )
    title = Column(String, nullable=False)
    description = Column(Text)
    status = Column(String, default=SubtaskStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    chore = relationship("Chore", back_populates="subtasks")


class ChoreHistory(Base):
    """Append-only audit log of chore lifecycle actions"""

    __tablename__ = "chore_history"

    id = Column(Integer, primary_key=True, index=True)
    chore_id = Column(
        Integer, ForeignKey("chores.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String, nullable=False)
    changed_by_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    chore = relationship("Chore", back_populates="history")
    changed_by = relationship("User")


class ChoreSwapRequest(Base):
    __tablename__ = "chore_swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    chore_id = Column(
        Integer, ForeignKey("chores.id", ondelete="CASCADE"), nullable=False
    )
    requesting_user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(String, default=ChoreSwapRequestStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    chore = relationship("Chore", back_populates="swap_requests")
    requesting_user = relationship("User", foreign_keys=[requesting_user_id])
    target_user = relationship("User", foreign_keys=[target_user_id])
