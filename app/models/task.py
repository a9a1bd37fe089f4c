"""
Task Model - Represents work items in the system
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import relationship
import enum

from app.database import Base, enum_values, utcnow

class TaskStatus(str, enum.Enum):
    """Task status enumeration - tracks task lifecycle"""
    PENDING = "pending"  # Not started
    IN_PROGRESS = "in_progress"  # Currently being worked on
    COMPLETED = "completed"  # Done

class TaskPriority(str, enum.Enum):
    """Task priority enumeration - helps with work prioritization"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class Task(Base):
    """
    Task table - stores work items and their metadata.
    A task owns up to MAX_DOCUMENTS_PER_TASK PDF documents.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)

    # Task content
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Task metadata - enums stored as VARCHAR(20) holding the lowercase value
    status = Column(
        SQLEnum(TaskStatus, values_callable=enum_values, native_enum=False, length=20),
        default=TaskStatus.PENDING,
        nullable=False,
        index=True,
    )
    priority = Column(
        SQLEnum(TaskPriority, values_callable=enum_values, native_enum=False, length=20),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    due_date = Column(DateTime, nullable=True)

    # Ownership and assignment
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Timestamps - automatically managed
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by], back_populates="tasks_created")
    assignee = relationship("User", foreign_keys=[assigned_to], back_populates="tasks_assigned")
    documents = relationship(
        "TaskDocument",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskDocument.id",  # Upload order
    )

    @property
    def created_by_email(self):
        return self.creator.email if self.creator else None

    @property
    def assigned_to_email(self):
        return self.assignee.email if self.assignee else None

    def __repr__(self):
        return f"<Task {self.id}: {self.title} ({self.status})>"
