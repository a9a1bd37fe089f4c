"""
API Package - Exports all API routers
"""

from app.api import auth, users, tasks, documents

__all__ = ["auth", "users", "tasks", "documents"]
