import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlmodel import Session

from esports_hub.config import (
    ADMIN_EMAIL,
    ADMIN_NAME,
    ADMIN_PASSWORD,
    LOG_LEVEL,
    UPLOAD_DIR,
    UPLOAD_URL_PREFIX,
)
from esports_hub.database import create_db_and_tables, engine
from esports_hub.services.auth import create_user, get_user_by_email, purge_expired_sessions

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: create tables and make sure an admin account exists
    create_db_and_tables()
    with Session(engine) as db:
        if not get_user_by_email(db, ADMIN_EMAIL):
            create_user(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name=ADMIN_NAME, is_admin=True)
            logger.info(f"Seeded admin account {ADMIN_EMAIL}")
        purged = purge_expired_sessions(db)
        if purged:
            logger.info(f"Purged {purged} expired sessions")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Esports Hub",
    description="Manage esports teams, tournaments and contact requests",
    version="1.0.0",
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    logger.info(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Response: {request.method} {request.url.path} -> {response.status_code}")
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Serve uploaded logos
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(UPLOAD_DIR)), name="uploads")

# Include routers
from esports_hub.routers import admin, auth, contact, invites, teams, tournaments, uploads, users

app.include_router(auth.router)
app.include_router(teams.router)
app.include_router(invites.router)
app.include_router(users.router)
app.include_router(uploads.router)
app.include_router(tournaments.router)
app.include_router(contact.router)
app.include_router(admin.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
