from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import CORS_ORIGINS, LOG_LEVEL
from database import init_db
from logging_setup import setup_logging
from responses import register_exception_handlers, send_success
from routes import auth_router, task_router, user_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Task tracker ready")
    yield


def create_app(create_tables: bool = True) -> FastAPI:
    """
    Creates and configures the FastAPI application.
    """
    setup_logging(LOG_LEVEL)

    app = FastAPI(
        title="Task Tracker",
        description="Multi-user task tracking with filtering, pagination and statistics.",
        version="1.0.0",
        lifespan=lifespan if create_tables else None,
    )

    # --- Middleware Configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(task_router)
    app.include_router(user_router)

    @app.get("/")
    def read_root():
        return send_success("Welcome to the Task Tracker API")

    @app.get("/api/health")
    def health():
        return send_success("Service is healthy", {"status": "ok"})

    return app


# Create the FastAPI app instance
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
