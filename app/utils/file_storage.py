"""
File Storage - Local upload directory for task documents
"""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, List, Union
import logging
import os
import uuid

from app.core.exceptions import PayloadTooLarge

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

@dataclass(frozen=True)
class StoredFile:
    """A file written to the upload directory during the current request"""
    filename: str  # Generated storage name
    original_name: str
    path: str
    size: int

class FileStore:
    """
    Flat directory of uploaded files under generated, collision-resistant names.

    save() enforces the per-file size cap while streaming; delete() is
    best-effort and only logs failures so cleanup never masks the real error.
    """

    def __init__(self, root: Union[str, Path], max_file_size: int):
        self.root = Path(root)
        self.max_file_size = max_file_size

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def generate_filename(self, original_name: str) -> str:
        suffix = Path(original_name or "").suffix.lower() or ".pdf"
        return f"{uuid.uuid4().hex}{suffix}"

    def save(self, source: BinaryIO, original_name: str) -> StoredFile:
        """
        Stream source into a new file.

        Raises:
            PayloadTooLarge: source exceeds max_file_size (the partial file is removed)
        """
        self.ensure_root()
        filename = self.generate_filename(original_name)
        path = self.root / filename
        size = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise PayloadTooLarge("File size exceeds maximum allowed")
                    out.write(chunk)
        except Exception:
            self.delete(str(path))
            raise
        logger.debug(f"💾 Stored upload '{original_name}' as {filename} ({size} bytes)")
        return StoredFile(filename=filename, original_name=original_name, path=str(path), size=size)

    def delete(self, path: str) -> bool:
        """Remove a stored file. Returns False (and logs) instead of raising."""
        try:
            os.remove(path)
            logger.debug(f"🗑️  Removed file {path}")
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"❌ Error cleaning up file {path}: {str(e)}")
            return False

    def delete_all(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.delete(path)

    def cleanup(self, stored: List[StoredFile]) -> None:
        """Compensating cleanup for every file written during a failed request"""
        if stored:
            logger.info(f"🧹 Cleaning up {len(stored)} uploaded file(s)")
        self.delete_all(item.path for item in stored)

    def exists(self, path: str) -> bool:
        return Path(path).is_file()
