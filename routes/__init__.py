from routes.auth_routes import router as auth_router
from routes.task_routes import router as task_router
from routes.user_routes import router as user_router

__all__ = ["auth_router", "task_router", "user_router"]
