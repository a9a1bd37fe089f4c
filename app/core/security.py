"""
Security Module - Handles password hashing and JWT token generation/validation
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
import logging

from app.core.config import Settings, get_settings
from app.core.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)

# Password hashing context - bcrypt, cost factor applied per hash from settings
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str, config: Optional[Settings] = None) -> str:
    """
    Hash a plaintext password using bcrypt.

    bcrypt salts every hash; the cost factor comes from BCRYPT_ROUNDS of `config`
    (the running app's settings), falling back to the process settings.

    Example:
        hashed = hash_password("MySecurePass123!")
        # Returns: $2b$12$abc...xyz (60 characters)
    """
    config = config or get_settings()
    return pwd_context.using(bcrypt__rounds=config.BCRYPT_ROUNDS).hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns:
        True if password matches, False otherwise (including corrupted hashes)
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)  # Constant-time comparison
    except (ValueError, TypeError) as e:
        logger.error(f"❌ Password verification error: {str(e)}")
        return False

def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    config: Optional[Settings] = None,
) -> str:
    """
    Create JWT access token for authentication.

    Args:
        data: Claims to encode (typically {"sub": str(user.id)})
        expires_delta: Optional custom expiration time
        config: Settings holding SECRET_KEY and ALGORITHM (defaults to the process settings)

    Returns:
        Signed JWT token string
    """
    settings = config or get_settings()
    to_encode = data.copy()

    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    logger.debug(f"✅ Created access token expiring at {expire}")
    return encoded_jwt

def verify_token(token: str, config: Optional[Settings] = None) -> dict:
    """
    Verify and decode JWT token.

    Verification checks:
        1. Signature is valid (token not tampered with)
        2. Token not expired
        3. Algorithm matches expected (prevents algorithm confusion attacks)

    Raises:
        AuthenticationFailed: expired or otherwise invalid token
    """
    settings = config or get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("⚠️  Token expired")
        raise AuthenticationFailed("Authentication token expired")
    except JWTError as e:
        logger.warning(f"⚠️  Invalid token: {str(e)}")
        raise AuthenticationFailed("Invalid authentication token")

def decode_token(token: str, config: Optional[Settings] = None) -> int:
    """
    Extract user ID from JWT token.

    Raises:
        AuthenticationFailed: token invalid, expired, or without a usable subject
    """
    payload = verify_token(token, config)
    subject = payload.get("sub")  # "sub" (subject) claim contains user ID
    try:
        return int(subject)
    except (TypeError, ValueError):
        logger.warning(f"⚠️  Token subject is not a user id: {subject!r}")
        raise AuthenticationFailed("Invalid authentication token")
