"""
Task operations scoped to the authenticated owner.

Every mutation fetches the task by (id, owner) first and only then writes it.
A task that does not exist and a task owned by someone else both surface as
NotFound.
"""
from typing import List, Tuple

from loguru import logger
from sqlmodel import Session

from errors import NotFound
from models import Task, TaskStatus, ensure_utc, utcnow
from queries import Pagination, TaskQuery, run_task_query
from schemas import TaskCreate, TaskRead, TaskUpdate
from stats import compute_task_stats
from stores import TaskStore, UserStore

# Fields that may be cleared by sending null
NULLABLE_FIELDS = {"description", "due_date", "category"}


class TaskService:
    def __init__(self, session: Session):
        self.tasks = TaskStore(session)
        self.users = UserStore(session)

    def _compose(self, tasks: List[Task]) -> List[TaskRead]:
        owners = self.users.get_many(task.user_id for task in tasks)
        return [TaskRead.compose(task, owners.get(task.user_id)) for task in tasks]

    def _get_owned(self, owner_id: str, task_id: str) -> Task:
        task = self.tasks.get_owned(task_id, owner_id)
        if task is None:
            raise NotFound("Task not found")
        return task

    def list_tasks(self, query: TaskQuery) -> Tuple[List[TaskRead], Pagination]:
        page = run_task_query(self.tasks, query)
        return self._compose(page.tasks), page.pagination

    def stats(self, owner_id: str) -> dict:
        return compute_task_stats(self.tasks, owner_id)

    def get_task(self, owner_id: str, task_id: str) -> TaskRead:
        return self._compose([self._get_owned(owner_id, task_id)])[0]

    def create_task(self, owner_id: str, data: TaskCreate) -> TaskRead:
        now = utcnow()
        task = Task(
            user_id=owner_id,
            title=data.title,
            description=data.description,
            priority=data.priority.value,
            due_date=ensure_utc(data.due_date),
            category=data.category,
            tags=list(data.tags),
            created_at=now,
            updated_at=now,
        )
        task.apply_status(data.status, now)
        task = self.tasks.insert(task)
        logger.debug("User {} created task {}", owner_id, task.id)
        return self._compose([task])[0]

    def update_task(self, owner_id: str, task_id: str, changes: TaskUpdate) -> TaskRead:
        task = self._get_owned(owner_id, task_id)
        now = utcnow()

        update_data = changes.model_dump(exclude_unset=True)
        status = update_data.pop("status", None)
        if status is not None:
            task.apply_status(status, now)

        for key, value in update_data.items():
            if value is None and key not in NULLABLE_FIELDS:
                continue
            if key == "due_date":
                value = ensure_utc(value)
            elif key == "priority":
                value = value.value
            setattr(task, key, value)

        task.updated_at = now
        task = self.tasks.save(task)
        return self._compose([task])[0]

    def toggle_task(self, owner_id: str, task_id: str) -> TaskRead:
        """Flips between pending and completed; in-progress toggles to completed."""
        task = self._get_owned(owner_id, task_id)
        now = utcnow()
        if task.status == TaskStatus.completed.value:
            task.apply_status(TaskStatus.pending, now)
        else:
            task.apply_status(TaskStatus.completed, now)
        task.updated_at = now
        task = self.tasks.save(task)
        return self._compose([task])[0]

    def delete_task(self, owner_id: str, task_id: str) -> None:
        task = self._get_owned(owner_id, task_id)
        self.tasks.delete(task)
        logger.debug("User {} deleted task {}", owner_id, task_id)
