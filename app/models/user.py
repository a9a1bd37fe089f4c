"""
User Model - Represents authenticated users in the system
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from app.database import Base, enum_values, utcnow

class UserRole(str, enum.Enum):
    """User role enumeration - defines permission levels"""
    USER = "user"  # Regular user - manages own and assigned tasks
    ADMIN = "admin"  # Admin user - manages every task and user

class User(Base):
    """
    User table - stores authentication and profile information.
    Deleting a user removes the tasks they created and unassigns tasks assigned to them.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # Authentication fields
    email = Column(String(255), unique=True, nullable=False, index=True)  # Unique identifier for login
    password_hash = Column(String(255), nullable=False)  # bcrypt hash (never store plaintext)

    # Authorization
    role = Column(
        SQLEnum(UserRole, values_callable=enum_values, native_enum=False, length=20),
        default=UserRole.USER,
        nullable=False,
    )

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships - created tasks go with the user, assigned tasks lose their assignee
    tasks_created = relationship(
        "Task",
        foreign_keys="Task.created_by",
        back_populates="creator",
        cascade="all, delete-orphan",
    )
    tasks_assigned = relationship("Task", foreign_keys="Task.assigned_to", back_populates="assignee")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
