"""
Task Manager API Package

Multi-user task tracking with PDF attachments.

Usage:
    from app.main import create_application
    from app.models import Task, TaskDocument
"""

__version__ = "1.0.0"  # Application version
