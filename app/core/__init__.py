"""
Core Package - Configuration, errors, security, and permissions

IMPORTANT: Only config, exceptions and security are re-exported here.
dependencies and permissions import the models, so import them directly
to avoid circular imports.
"""

from app.core.config import Settings, settings, get_settings, validate_config
from app.core.exceptions import AppError
from app.core.security import hash_password, verify_password, create_access_token, decode_token

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "validate_config",
    "AppError",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
