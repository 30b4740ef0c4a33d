from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Returns the datetime as an aware UTC value.

    SQLite hands timestamps back without tzinfo; everything is stored in UTC,
    so a naive value is treated as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    return uuid4().hex


class Role(str, Enum):
    user = "user"
    admin = "admin"


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class User(SQLModel, table=True):
    """
    A registered account. The password is only ever held as a bcrypt hash and
    is never part of any outward representation (see schemas.UserRead).
    """
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(max_length=50, nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)  # stored lower-cased
    hashed_password: str = Field(nullable=False)
    role: str = Field(default=Role.user.value, max_length=10, nullable=False)
    is_active: bool = Field(default=True, nullable=False)
    last_login: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)


class Task(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    user_id: str = Field(index=True, nullable=False, foreign_key="user.id")
    title: str = Field(max_length=100, nullable=False)
    description: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(default=TaskStatus.pending.value, max_length=20, index=True, nullable=False)
    priority: str = Field(default=TaskPriority.medium.value, max_length=10, index=True, nullable=False)
    due_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    category: Optional[str] = Field(default=None, max_length=50)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_completed: bool = Field(default=False, nullable=False)
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), nullable=False)

    def apply_status(self, status: str, now: Optional[datetime] = None) -> None:
        """
        Sets the status and keeps is_completed/completed_at in step with it.
        """
        status = TaskStatus(status).value
        if status == self.status and self.is_completed == (status == TaskStatus.completed.value):
            return
        self.status = status
        if status == TaskStatus.completed.value:
            self.is_completed = True
            self.completed_at = now or utcnow()
        else:
            self.is_completed = False
            self.completed_at = None
