from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from auth_service import AuthService
from database import get_session
from dependencies import get_current_user
from models import User
from responses import send_success
from schemas import PasswordChange, ProfileUpdate, UserCreate, UserLogin, UserRead, UserSummary, dump

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_payload(user: User, token: str) -> dict:
    return {"user": dump(UserSummary.model_validate(user)), "token": token}


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: Session = Depends(get_session)):
    result = AuthService(db).register(user_in.name, user_in.email, user_in.password)
    return send_success("User registered successfully", _auth_payload(*result), status.HTTP_201_CREATED)


@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_session)):
    result = AuthService(db).login(credentials.email, credentials.password)
    return send_success("Login successful", _auth_payload(*result))


@router.get("/me")
def read_users_me(current_user: User = Depends(get_current_user)):
    return send_success("User data retrieved successfully", {"user": dump(UserRead.model_validate(current_user))})


@router.put("/profile")
def update_profile(profile: ProfileUpdate, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    user = AuthService(db).update_profile(current_user.id, name=profile.name, email=profile.email)
    return send_success("Profile updated successfully", {"user": dump(UserRead.model_validate(user))})


@router.put("/change-password")
def change_password(passwords: PasswordChange, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    AuthService(db).change_password(current_user.id, passwords.current_password, passwords.new_password)
    return send_success("Password changed successfully")


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy.
    return send_success("Logged out successfully")
