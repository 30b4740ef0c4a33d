"""
Task query engine: filtering, ordering and pagination over one owner's tasks.

The owner id is always the one resolved from the caller's token. Page and limit
bounds are checked at the request boundary; this module does not clamp them.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from sqlalchemy import case, func

from config import DEFAULT_PAGE_SIZE
from models import Task, TaskPriority, TaskStatus
from stores import TaskStore


class SortField(str, Enum):
    created_at = "createdAt"
    updated_at = "updatedAt"
    title = "title"
    due_date = "dueDate"
    priority = "priority"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


PRIORITY_RANK = {
    TaskPriority.low.value: 1,
    TaskPriority.medium.value: 2,
    TaskPriority.high.value: 3,
}


@dataclass
class TaskQuery:
    """Optional filters; None means no constraint on that field."""
    owner_id: str
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: SortField = SortField.created_at
    sort_order: SortOrder = SortOrder.desc


@dataclass
class Pagination:
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool

    def as_dict(self, total_key: str = "totalTasks") -> dict:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            total_key: self.total,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


@dataclass
class TaskPage:
    tasks: List[Task]
    pagination: Pagination


def paginate(total: int, page: int, limit: int) -> Pagination:
    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total=total,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def build_criteria(query: TaskQuery) -> list:
    criteria = [Task.user_id == query.owner_id]
    if query.status is not None:
        criteria.append(Task.status == TaskStatus(query.status).value)
    if query.priority is not None:
        criteria.append(Task.priority == TaskPriority(query.priority).value)
    if query.category:
        criteria.append(func.lower(Task.category).contains(query.category.lower(), autoescape=True))
    return criteria


def build_ordering(sort_by: SortField, sort_order: SortOrder) -> list:
    descending = SortOrder(sort_order) == SortOrder.desc
    sort_by = SortField(sort_by)

    if sort_by == SortField.priority:
        key = case(PRIORITY_RANK, value=Task.priority, else_=0)
    elif sort_by == SortField.title:
        key = Task.title
    elif sort_by == SortField.due_date:
        key = Task.due_date
    elif sort_by == SortField.updated_at:
        key = Task.updated_at
    else:
        key = Task.created_at

    ordering = []
    if sort_by == SortField.due_date:
        # Undated tasks go last in either direction.
        ordering.append(Task.due_date.is_(None))
    ordering.append(key.desc() if descending else key.asc())
    # Tie-break on id so equal sort keys page deterministically.
    ordering.append(Task.id.desc() if descending else Task.id.asc())
    return ordering


def run_task_query(store: TaskStore, query: TaskQuery) -> TaskPage:
    criteria = build_criteria(query)
    total = store.count(criteria)
    offset = (query.page - 1) * query.limit
    if offset >= total:
        tasks = []
    else:
        tasks = store.find(criteria, build_ordering(query.sort_by, query.sort_order), offset, query.limit)
    return TaskPage(tasks=tasks, pagination=paginate(total, query.page, query.limit))
