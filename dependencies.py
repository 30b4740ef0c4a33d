from typing import Optional

from fastapi import Depends
from sqlmodel import Session

from auth import oauth2_scheme, resolve_user_id
from database import get_session
from errors import Forbidden, Unauthorized
from models import Role, User
from stores import UserStore


def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_session)) -> User:
    if not token:
        raise Unauthorized("Not authenticated")
    user_id = resolve_user_id(token)
    user = UserStore(db).get(user_id)
    if user is None or not user.is_active:
        raise Unauthorized("Could not validate credentials")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.admin.value:
        raise Forbidden("Admin access required")
    return current_user
