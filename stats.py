from datetime import datetime
from typing import Optional

from models import TaskPriority, TaskStatus, utcnow
from stores import TaskStore


def empty_status_stats() -> dict:
    stats = {status.value: 0 for status in TaskStatus}
    stats["total"] = 0
    return stats


def compute_task_stats(store: TaskStore, owner_id: str, now: Optional[datetime] = None) -> dict:
    """
    Per-status, per-priority and overdue counts over all of an owner's tasks.

    Overdue means a due date in the past on a task that is not completed.
    """
    now = now or utcnow()
    status_stats = empty_status_stats()
    by_priority = {}
    overdue = 0

    for status, priority, count, overdue_count in store.summarize(owner_id, now):
        status_stats[status] = status_stats.get(status, 0) + count
        status_stats["total"] += count
        by_priority[priority] = by_priority.get(priority, 0) + count
        overdue += int(overdue_count)

    order = [p.value for p in TaskPriority]
    priority_stats = [
        {"_id": priority, "count": by_priority[priority]}
        for priority in sorted(by_priority, key=lambda p: order.index(p) if p in order else len(order))
    ]
    return {
        "statusStats": status_stats,
        "priorityStats": priority_stats,
        "overdueTasks": overdue,
    }


def compute_status_stats(store: TaskStore, owner_id: str) -> dict:
    return compute_task_stats(store, owner_id)["statusStats"]
