"""
Registration, login and self-service account operations.

Orchestrates the credential store, password hashing and the token service.
"""
from typing import NamedTuple, Optional

from loguru import logger
from sqlmodel import Session

from auth import issue_token
from errors import AccountDeactivated, Conflict, InvalidCredentials, NotFound
from models import Role, User, utcnow
from security import get_password_hash, needs_rehash, verify_password
from stores import UserStore


class AuthResult(NamedTuple):
    user: User
    token: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(self, session: Session):
        self.users = UserStore(session)

    def register(self, name: str, email: str, password: str) -> AuthResult:
        email = normalize_email(email)
        if self.users.find_by_email(email):
            raise Conflict()

        user = self.users.insert(User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=Role.user.value,
            is_active=True,
        ))
        logger.info("Registered user {}", user.id)
        return AuthResult(user, issue_token(user.id))

    def login(self, email: str, password: str) -> AuthResult:
        user = self.users.find_by_email(normalize_email(email))
        if user is None:
            logger.info("Rejected login attempt")
            raise InvalidCredentials()
        if not user.is_active:
            logger.info("Rejected login for deactivated user {}", user.id)
            raise AccountDeactivated()
        if not verify_password(password, user.hashed_password):
            logger.info("Rejected login attempt for user {}", user.id)
            raise InvalidCredentials()

        if needs_rehash(user.hashed_password):
            user.hashed_password = get_password_hash(password)
        user.last_login = utcnow()
        user = self.users.save(user)
        logger.info("User {} logged in", user.id)
        return AuthResult(user, issue_token(user.id))

    def get_self(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, user_id: str, name: Optional[str] = None, email: Optional[str] = None) -> User:
        user = self.get_self(user_id)
        if email is not None:
            email = normalize_email(email)
            if self.users.find_by_email(email, exclude_id=user_id):
                raise Conflict("Email is already taken")
            user.email = email
        if name is not None:
            user.name = name
        user.updated_at = utcnow()
        return self.users.save(user)

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.get_self(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise InvalidCredentials("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        user.updated_at = utcnow()
        self.users.save(user)
        logger.info("User {} changed password", user_id)
