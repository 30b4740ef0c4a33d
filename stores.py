"""
Credential and task stores.

Thin wrappers around a SQLModel Session so that the services deal in
find/insert/save/delete calls and never commit themselves.
Every write commits immediately; on failure the session is rolled back and the
failure is reported as a typed error, leaving the stored record unchanged.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy import and_, case, delete as sa_delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import ObjectDeletedError, StaleDataError
from sqlmodel import Session, func, select

from errors import Conflict, InternalError, NotFound
from models import Task, TaskStatus, User


@contextmanager
def _write(session: Session, not_found_message: str = "Resource not found") -> Iterator[None]:
    try:
        yield
        session.commit()
    except (StaleDataError, ObjectDeletedError):
        # The row vanished between the ownership check and the write.
        session.rollback()
        raise NotFound(not_found_message)
    except IntegrityError:
        session.rollback()
        raise
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Store write failed")
        raise InternalError()


class UserStore:
    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str, exclude_id: Optional[str] = None) -> Optional[User]:
        statement = select(User).where(User.email == email.strip().lower())
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        return self.session.exec(statement).first()

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        users = self.session.exec(select(User).where(User.id.in_(ids))).all()
        return {user.id: user for user in users}

    def insert(self, user: User) -> User:
        try:
            with _write(self.session):
                self.session.add(user)
        except IntegrityError:
            # Lost a race with another registration for the same address.
            raise Conflict()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        try:
            with _write(self.session, "User not found"):
                self.session.add(user)
        except IntegrityError:
            raise Conflict("Email is already taken")
        self.session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        with _write(self.session, "User not found"):
            self.session.delete(user)

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(User)).one()

    def list_page(self, offset: int, limit: int) -> List[User]:
        statement = (
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.exec(statement).all())


class TaskStore:
    def __init__(self, session: Session):
        self.session = session

    def get_owned(self, task_id: str, owner_id: str) -> Optional[Task]:
        """Fetches a task only if it belongs to owner_id."""
        statement = select(Task).where(Task.id == task_id, Task.user_id == owner_id)
        return self.session.exec(statement).first()

    def insert(self, task: Task) -> Task:
        with _write(self.session):
            self.session.add(task)
        self.session.refresh(task)
        return task

    def save(self, task: Task) -> Task:
        with _write(self.session, "Task not found"):
            self.session.add(task)
        self.session.refresh(task)
        return task

    def delete(self, task: Task) -> None:
        with _write(self.session, "Task not found"):
            self.session.delete(task)

    def delete_by_owner(self, owner_id: str) -> int:
        with _write(self.session):
            result = self.session.exec(sa_delete(Task).where(Task.user_id == owner_id))
        return result.rowcount or 0

    def count(self, criteria: Sequence) -> int:
        statement = select(func.count()).select_from(Task).where(*criteria)
        return self.session.exec(statement).one()

    def find(self, criteria: Sequence, order_by: Sequence, offset: int, limit: int) -> List[Task]:
        statement = select(Task).where(*criteria).order_by(*order_by).offset(offset).limit(limit)
        return list(self.session.exec(statement).all())

    def summarize(self, owner_id: str, now: datetime) -> List[Tuple[str, str, int, int]]:
        """
        Returns (status, priority, task count, overdue count) rows for an owner.

        A single statement, so every figure derived from the rows comes from
        the same read.
        """
        overdue = case(
            (and_(
                Task.due_date.is_not(None),
                Task.due_date < now,
                Task.status != TaskStatus.completed.value,
            ), 1),
            else_=0,
        )
        statement = (
            select(Task.status, Task.priority, func.count(), func.coalesce(func.sum(overdue), 0))
            .where(Task.user_id == owner_id)
            .group_by(Task.status, Task.priority)
        )
        return [tuple(row) for row in self.session.exec(statement).all()]
