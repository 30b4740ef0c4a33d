from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from database import get_session
from dependencies import get_current_user
from models import TaskPriority, TaskStatus, User
from queries import SortField, SortOrder, TaskQuery
from responses import send_success
from schemas import TaskCreate, TaskUpdate, dump
from task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("/stats")
def get_task_stats(current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    stats = TaskService(db).stats(current_user.id)
    return send_success("Task statistics retrieved successfully", stats)


@router.get("")
def list_tasks(
    status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
    priority: Optional[TaskPriority] = None,
    category: Optional[str] = Query(default=None, max_length=50),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortField = Query(default=SortField.created_at, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.desc, alias="sortOrder"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
):
    service = TaskService(db)
    query = TaskQuery(
        owner_id=current_user.id,
        status=status_filter,
        priority=priority,
        category=category or None,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    tasks, pagination = service.list_tasks(query)
    return send_success("Tasks retrieved successfully", {
        "tasks": [dump(task) for task in tasks],
        "pagination": pagination.as_dict("totalTasks"),
        "stats": service.stats(current_user.id)["statusStats"],
    })


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(task_in: TaskCreate, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    task = TaskService(db).create_task(current_user.id, task_in)
    return send_success("Task created successfully", {"task": dump(task)}, status.HTTP_201_CREATED)


@router.get("/{task_id}")
def get_task(task_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    task = TaskService(db).get_task(current_user.id, task_id)
    return send_success("Task retrieved successfully", {"task": dump(task)})


@router.put("/{task_id}")
def update_task(task_id: str, task_update: TaskUpdate, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    task = TaskService(db).update_task(current_user.id, task_id, task_update)
    return send_success("Task updated successfully", {"task": dump(task)})


@router.delete("/{task_id}")
def delete_task(task_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    TaskService(db).delete_task(current_user.id, task_id)
    return send_success("Task deleted successfully")


@router.patch("/{task_id}/toggle")
def toggle_task_completion(task_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_session)):
    task = TaskService(db).toggle_task(current_user.id, task_id)
    return send_success("Task status updated successfully", {"task": dump(task)})
