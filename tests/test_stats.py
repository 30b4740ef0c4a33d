from sqlmodel import Session

from models import TaskPriority, TaskStatus
from schemas import TaskUpdate
from stats import compute_task_stats, empty_status_stats
from stores import TaskStore
from task_service import TaskService

from conftest import days_ago, make_task, make_user


def test_one_task_per_status(test_db_session: Session):
    owner = make_user(test_db_session, "stats@example.com")
    make_task(test_db_session, owner, "A", status=TaskStatus.pending)
    make_task(test_db_session, owner, "B", status=TaskStatus.in_progress)
    make_task(test_db_session, owner, "C", status=TaskStatus.completed)

    stats = compute_task_stats(TaskStore(test_db_session), owner.id)
    assert stats["statusStats"] == {"pending": 1, "in-progress": 1, "completed": 1, "total": 3}
    assert stats["priorityStats"] == [{"_id": "medium", "count": 3}]
    assert stats["overdueTasks"] == 0


def test_no_tasks(test_db_session: Session):
    owner = make_user(test_db_session, "empty@example.com")
    stats = compute_task_stats(TaskStore(test_db_session), owner.id)
    assert stats == {"statusStats": empty_status_stats(), "priorityStats": [], "overdueTasks": 0}


def test_priority_counts_in_rank_order(test_db_session: Session):
    owner = make_user(test_db_session, "prio@example.com")
    for priority in ("high", "low", "high", "medium", "high"):
        make_task(test_db_session, owner, priority, priority=priority)

    stats = compute_task_stats(TaskStore(test_db_session), owner.id)
    assert stats["priorityStats"] == [
        {"_id": TaskPriority.low.value, "count": 1},
        {"_id": TaskPriority.medium.value, "count": 1},
        {"_id": TaskPriority.high.value, "count": 3},
    ]


def test_overdue_ignores_completed_future_and_undated(test_db_session: Session):
    owner = make_user(test_db_session, "late@example.com")
    make_task(test_db_session, owner, "Late", due_date=days_ago(1))
    make_task(test_db_session, owner, "Late but working", due_date=days_ago(3), status=TaskStatus.in_progress)
    make_task(test_db_session, owner, "Late but done", due_date=days_ago(1), status=TaskStatus.completed)
    make_task(test_db_session, owner, "Future", due_date=days_ago(-2))
    make_task(test_db_session, owner, "Undated")

    stats = compute_task_stats(TaskStore(test_db_session), owner.id)
    assert stats["overdueTasks"] == 2
    assert stats["statusStats"]["total"] == 5


def test_overdue_scenario_through_service(test_db_session: Session):
    owner = make_user(test_db_session, "scenario@example.com")
    task = make_task(test_db_session, owner, "Due yesterday", due_date=days_ago(1))
    service = TaskService(test_db_session)

    assert service.stats(owner.id)["overdueTasks"] == 1
    service.update_task(owner.id, task.id, TaskUpdate(status=TaskStatus.completed))
    assert service.stats(owner.id)["overdueTasks"] == 0


def test_stats_are_scoped_to_owner(test_db_session: Session):
    owner = make_user(test_db_session, "mine@example.com")
    other = make_user(test_db_session, "theirs@example.com")
    make_task(test_db_session, owner, "Mine")
    for index in range(4):
        make_task(test_db_session, other, f"Theirs {index}", due_date=days_ago(1))

    stats = compute_task_stats(TaskStore(test_db_session), owner.id)
    assert stats["statusStats"]["total"] == 1
    assert stats["overdueTasks"] == 0
