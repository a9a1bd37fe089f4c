"""
Utilities Package - Helper functions and tools

This package contains:
- file_storage.py: Upload directory with generated filenames and best-effort cleanup
"""

from app.utils.file_storage import FileStore, StoredFile

__all__ = [
    "FileStore",
    "StoredFile",
]
