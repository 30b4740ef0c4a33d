from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from database import get_session
from dependencies import get_current_user, require_admin
from models import User
from responses import send_success
from schemas import UserRead, UserStatusUpdate, dump
from user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_session),
):
    users, pagination = UserService(db).list_users(page, limit)
    return send_success("Users retrieved successfully", {
        "users": [dump(UserRead.model_validate(user)) for user in users],
        "pagination": pagination.as_dict("totalUsers"),
    })


@router.get("/{user_id}")
def get_user(user_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    user, task_stats = UserService(db).get_user(current_user, user_id)
    return send_success("User retrieved successfully", {
        "user": dump(UserRead.model_validate(user)),
        "taskStats": task_stats,
    })


@router.put("/{user_id}/status")
def update_user_status(user_id: str, body: UserStatusUpdate, admin: User = Depends(require_admin), db: Session = Depends(get_session)):
    user = UserService(db).set_active(user_id, body.is_active)
    return send_success("User status updated successfully", {"user": dump(UserRead.model_validate(user))})


@router.delete("/{user_id}")
def delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_session)):
    UserService(db).delete_user(user_id)
    return send_success("User and associated tasks deleted successfully")
