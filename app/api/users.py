"""
Users API - User listing, profile and administration endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.schemas import MessageResponse, Pagination, UserDetailResponse, UserListResponse, UserResponse, UserUpdate
from app.models import User
from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_current_user, get_current_admin_user, get_file_store
from app.core.exceptions import AppError, NotFound, ValidationFailed
from app.core.permissions import UserCapability, authorize_user
from app.core.security import hash_password
from app.services import tasks as task_service
from app.utils.file_storage import FileStore

logger = logging.getLogger(__name__)
router = APIRouter()

def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"⚠️  User {user_id} not found")
        raise NotFound("User not found")
    return user

@router.get("", response_model=UserListResponse)
def get_all_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Case-insensitive match on email"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List users - available to every authenticated user so tasks can be assigned.
    """
    logger.info(f"➡️  Get users request from: {current_user.email}")

    query = db.query(User)
    if search:
        query = query.filter(User.email.ilike(f"%{search}%"))

    total = query.count()
    offset = (page - 1) * limit
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()

    logger.info(f"✅ Returning {len(users)} users (total: {total})")
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        pagination=Pagination.build(page, limit, total),
    )

@router.get("/me", response_model=UserDetailResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Current user's profile"""
    return UserDetailResponse(user=UserResponse.model_validate(current_user))

@router.put("/{user_id}", response_model=UserDetailResponse)
def update_user(
    user_id: int,
    patch: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_app_settings),
):
    """
    Update email, password or role.

    Users may edit themselves; admins may edit anyone. A role change is only
    applied when the actor is an admin and is ignored otherwise.

    Raises:
        400: nothing to update
        403: editing someone else without admin role
        404: user not found
        409: email already taken
    """
    authorize_user(current_user, UserCapability.MANAGE_PROFILE, user_id)
    changes = patch.changes()
    if "role" in changes and not current_user.is_admin:
        logger.warning(f"⚠️  Ignoring role change from non-admin {current_user.email}")
        changes.pop("role")
    if not changes:
        raise ValidationFailed("No valid fields to update")

    user = _get_user_or_404(db, user_id)
    if "email" in changes:
        user.email = changes["email"]
    if "password" in changes:
        user.password_hash = hash_password(changes["password"], config)
    if "role" in changes:
        user.role = changes["role"]

    db.commit()  # Duplicate email -> IntegrityError -> 409 in the central handler
    db.refresh(user)
    logger.info(f"✅ User {user_id} updated ({', '.join(sorted(changes))})")
    return UserDetailResponse(message="User updated successfully", user=UserResponse.model_validate(user))

@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_admin: User = Depends(get_current_admin_user),  # Admin only
    db: Session = Depends(get_db),
    file_store: FileStore = Depends(get_file_store),
):
    """
    Delete a user (admin only). Their tasks and task documents are removed;
    tasks assigned to them become unassigned.

    Raises:
        400: deleting your own account
        404: user not found
    """
    logger.info(f"➡️  Delete user {user_id} request from admin: {current_admin.email}")
    if current_admin.id == user_id:
        raise AppError("Cannot delete your own account")

    user = _get_user_or_404(db, user_id)
    task_service.delete_user(db, user, file_store)
    return MessageResponse(message="User deleted successfully")
