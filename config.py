import os
from dotenv import load_dotenv

load_dotenv()


# Configuration for JWT
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable not set.")

ALGORITHM = "HS256"
# Default lifetime is seven days
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tasks.db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() in ("1", "true", "yes")

# HTTP
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
