"""
Task Document Model - PDF attachment stored in the upload directory
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base, utcnow

class TaskDocument(Base):
    """
    One uploaded PDF bound to exactly one task.
    The file itself lives at file_path; rows are removed with their task.
    """
    __tablename__ = "task_documents"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)

    filename = Column(String(255), nullable=False)  # Generated storage name
    original_name = Column(String(255), nullable=False)  # Name the client uploaded
    file_path = Column(String(500), nullable=False)

    uploaded_at = Column(DateTime, default=utcnow, nullable=False)

    task = relationship("Task", back_populates="documents")

    def __repr__(self):
        return f"<TaskDocument {self.id}: {self.original_name} -> {self.filename}>"
