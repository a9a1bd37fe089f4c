"""
Authentication API - User registration and login endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.schemas import UserCreate, UserLogin, TokenResponse, UserResponse
from app.models import User, UserRole
from app.core.config import Settings
from app.core.dependencies import get_app_settings
from app.core.exceptions import AuthenticationFailed, Conflict
from app.core.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)
router = APIRouter()

def _token_for(user: User, config: Settings) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value},
        config=config,
    )

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,  # Validated by Pydantic (email, password)
    db: Session = Depends(get_db),
    config: Settings = Depends(get_app_settings),
):
    """
    Register new user account.

    Process:
        1. Validate input (Pydantic handles this)
        2. Check if email already exists
        3. Hash password and create the user with the user role
        4. Generate JWT token

    Raises:
        409: Email already registered
    """
    logger.info(f"➡️  Registration attempt for email: {user_data.email}")

    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        logger.warning(f"⚠️  Registration failed - email already exists: {user_data.email}")
        raise Conflict("User already exists")

    new_user = User(
        email=user_data.email,
        password_hash=hash_password(user_data.password, config),
        role=UserRole.USER,
    )
    db.add(new_user)
    db.commit()  # IntegrityError on a concurrent duplicate is mapped to 409 centrally
    db.refresh(new_user)
    logger.info(f"✅ User registered successfully: {new_user.email}")

    return TokenResponse(
        message="User registered successfully",
        token=_token_for(new_user, config),
        user=UserResponse.model_validate(new_user),
    )

@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    config: Settings = Depends(get_app_settings),
):
    """
    Authenticate user and return JWT token.

    Raises:
        401: Invalid credentials (same message for unknown email and wrong password)
    """
    logger.info(f"➡️  Login attempt for email: {credentials.email}")

    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"⚠️  Login failed for: {credentials.email}")
        raise AuthenticationFailed("Invalid credentials")

    logger.info(f"✅ Login successful: {user.email}")
    return TokenResponse(
        message="Login successful",
        token=_token_for(user, config),
        user=UserResponse.model_validate(user),
    )
