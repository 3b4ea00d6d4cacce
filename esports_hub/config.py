import os
from pathlib import Path

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/esports.db")

# Sessions
SESSION_COOKIE_NAME = "esports_session"
SESSION_EXPIRE_DAYS = int(os.getenv("SESSION_EXPIRE_DAYS", "30"))

# Admin account seeded on startup (override in production)
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin")

# Uploads
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads")))
UPLOAD_URL_PREFIX = "/uploads"
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_UPLOAD_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}

# User search
USER_SEARCH_MIN_LENGTH = 3
USER_SEARCH_LIMIT = 10

# Dashboard
DASHBOARD_LIST_LIMIT = 5

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
