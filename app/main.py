from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import atexit
import logging
import os
import uvicorn

from . import routers
from .database import init_db, check_db_connection
from .utils.background_tasks import (
    scheduler,
    start_background_tasks,
    stop_background_tasks,
)
from .utils.realtime import manager

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
ENABLE_BACKGROUND_TASKS = os.getenv("ENABLE_BACKGROUND_TASKS", "true").lower() == "true"

# Initialize FastAPI app
app = FastAPI(
    title="HouseholdHub API",
    description="Household management API: chores, expenses, calendar and messaging",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create tables, bind the broadcast loop and start background jobs"""
    logger.info("Starting HouseholdHub API...")
    init_db()
    manager.bind_loop(asyncio.get_running_loop())
    if ENABLE_BACKGROUND_TASKS:
        start_background_tasks()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Stopping background tasks...")
    stop_background_tasks()


# Include routers
HOUSEHOLD = "/api/households/{household_id}"

app.include_router(routers.auth.router, prefix="/api/auth")
app.include_router(routers.users.router, prefix="/api/users")
app.include_router(routers.households.router, prefix="/api/households")
app.include_router(routers.chores.router, prefix=f"{HOUSEHOLD}/chores")
app.include_router(routers.expenses.router, prefix=f"{HOUSEHOLD}/expenses")
app.include_router(routers.transactions.router, prefix=f"{HOUSEHOLD}/transactions")
app.include_router(routers.events.router, prefix=f"{HOUSEHOLD}/events")
app.include_router(routers.threads.router, prefix=f"{HOUSEHOLD}/threads")
app.include_router(
    routers.messages.router, prefix=f"{HOUSEHOLD}/threads/{{thread_id}}/messages"
)
app.include_router(routers.messaging.router, prefix=HOUSEHOLD)
app.include_router(routers.notifications.router, prefix="/api/notifications")
app.include_router(routers.recurrence_rules.router, prefix="/api/recurrence-rules")
app.include_router(routers.realtime.router)

atexit.register(stop_background_tasks)


@app.get("/")
async def root():
    return {"message": "Welcome to HouseholdHub API", "status": "running"}


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "householdhub-api",
        "version": "1.0.0",
        "database": check_db_connection(),
        "background_tasks": scheduler.get_status(),
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
