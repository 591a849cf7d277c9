# hostel_leave/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
import sys
import time
import psutil

from hostel_leave.core.database import test_connection, init_db, AsyncSessionLocal
from hostel_leave.core.config import settings
from hostel_leave.services.auth_service import get_user_by_email, create_user
from hostel_leave.models.user import UserRole

# Routers
from hostel_leave.api.endpoints import (
    auth as auth_router,
    users as users_router,
    student_leave as student_leave_router,
    admin_leave as admin_leave_router,
    logs as logs_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    level="WARNING" if settings.TESTING else "INFO",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Hostel Leave Backend",
    version="1.0.0",
    description="Leave application lifecycle service for the hostel management dashboard.",
)

START_TIME = time.time()


# ------------------------------------------------------------
# METRICS API
# ------------------------------------------------------------
@app.get("/api/metrics", tags=["System"])
async def metrics():
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent

    db_start = time.time()
    db_latency = 0
    try:
        await test_connection()
        db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception:
        logger.exception("Metrics: database ping failed.")
        db_status = "Error"

    return {
        "status": "Online",
        "version": app.version,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "uptime": uptime_seconds,
        "database": db_status,
        "db_latency": db_latency,
    }


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(student_leave_router.router)
app.include_router(admin_leave_router.router)
app.include_router(logs_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
async def seed_super_admin():
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
        return

    async with AsyncSessionLocal() as session:
        existing = await get_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
        if existing:
            logger.info("Super Admin already exists. Skipping.")
            return

        logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
        await create_user(
            session=session,
            name=settings.SUPER_ADMIN_NAME or "Super Admin",
            email=settings.SUPER_ADMIN_EMAIL,
            password=settings.SUPER_ADMIN_PASSWORD,
            role=UserRole.Admin,
        )
        logger.success("Super Admin created successfully.")


@app.on_event("startup")
async def on_startup():
    logger.info("Starting Hostel Leave Backend...")

    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    try:
        await init_db()
        logger.success("Database tables ready.")
    except Exception as e:
        logger.warning(f"Table initialization encountered an issue: {e}")

    try:
        await seed_super_admin()
    except Exception:
        logger.exception("Super Admin seeding failed.")

    logger.success("Backend startup completed successfully.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "Hostel Leave Backend",
        "version": app.version,
    }
