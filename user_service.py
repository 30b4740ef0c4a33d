"""
Admin user management: listing, lookup, activation and cascade deletion.
"""
from typing import List, Tuple

from loguru import logger
from sqlmodel import Session

from errors import Forbidden, NotFound
from models import Role, User, utcnow
from queries import Pagination, paginate
from stats import compute_status_stats
from stores import TaskStore, UserStore


class UserService:
    def __init__(self, session: Session):
        self.users = UserStore(session)
        self.tasks = TaskStore(session)

    def _get(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def list_users(self, page: int, limit: int) -> Tuple[List[User], Pagination]:
        total = self.users.count()
        offset = (page - 1) * limit
        users = self.users.list_page(offset, limit) if offset < total else []
        return users, paginate(total, page, limit)

    def get_user(self, requester: User, user_id: str) -> Tuple[User, dict]:
        """A user may look themselves up; anyone else requires the admin role."""
        if requester.id != user_id and requester.role != Role.admin.value:
            raise Forbidden()
        user = self._get(user_id)
        return user, compute_status_stats(self.tasks, user.id)

    def set_active(self, user_id: str, is_active: bool) -> User:
        user = self._get(user_id)
        user.is_active = is_active
        user.updated_at = utcnow()
        user = self.users.save(user)
        logger.info("User {} is_active set to {}", user_id, is_active)
        return user

    def delete_user(self, user_id: str) -> int:
        """
        Deletes the user's tasks, then the user. The two steps are not atomic;
        a failure in between leaves the user in place with no tasks.
        """
        user = self._get(user_id)
        removed = self.tasks.delete_by_owner(user.id)
        self.users.delete(user)
        logger.info("Deleted user {} and {} task(s)", user_id, removed)
        return removed
