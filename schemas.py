"""
Request bodies and the outward views of users and tasks.

Everything crosses the wire in camelCase. The stored hash never appears in any
view model.
"""
from typing import List, Optional
from datetime import date, datetime, time, timezone

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from models import Task, TaskPriority, TaskStatus, User, ensure_utc


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


# --- Auth requests ---

class UserCreate(APIModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)


class UserLogin(APIModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None


class PasswordChange(APIModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class UserStatusUpdate(APIModel):
    is_active: bool


# --- Task requests ---

class TaskCreate(APIModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: TaskStatus = TaskStatus.pending
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    category: Optional[str] = Field(default=None, max_length=50)
    tags: List[str] = Field(default_factory=list)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, value):
        return _parse_date_only(value)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, tags: List[str]) -> List[str]:
        return _clean_tags(tags)


class TaskUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    category: Optional[str] = Field(default=None, max_length=50)
    tags: Optional[List[str]] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, value):
        return _parse_date_only(value)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        return None if tags is None else _clean_tags(tags)


def _clean_tags(tags: List[str]) -> List[str]:
    cleaned = [tag.strip() for tag in tags]
    for tag in cleaned:
        if len(tag) > 30:
            raise ValueError("Each tag must be at most 30 characters")
    return cleaned


def _parse_date_only(value):
    # A bare YYYY-MM-DD is taken as midnight UTC of that day.
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            return datetime.combine(date.fromisoformat(value.strip()), time.min, tzinfo=timezone.utc)
        except ValueError:
            return value
    return value


# --- Views ---

class UserSummary(APIModel):
    id: str
    name: str
    email: str
    role: str


class UserRead(UserSummary):
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("last_login", "created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class OwnerView(APIModel):
    id: str
    name: str
    email: str


class TaskRead(APIModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_completed: bool
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[OwnerView] = None

    @field_validator("due_date", "completed_at", "created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @classmethod
    def compose(cls, task: Task, owner: Optional[User]) -> "TaskRead":
        """Builds the outward view of a task joined with its owner's public fields."""
        view = cls.model_validate(task)
        if owner is not None:
            view.user = OwnerView.model_validate(owner)
        return view


def dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)
