import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from finance_tracker import __version__
from finance_tracker.db.core import init_db
from finance_tracker.logging_config import setup_logging, get_logger
from finance_tracker.routers.users import router as users_router
from finance_tracker.routers.categories import router as categories_router
from finance_tracker.routers.transactions import router as transactions_router
from finance_tracker.routers.budgets import router as budgets_router
from finance_tracker.routers.debts import router as debts_router
from finance_tracker.routers.goals import router as goals_router
from finance_tracker.routers.summary import router as summary_router
from finance_tracker.routers.export import router as export_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    if os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true":
        init_db()
    logger.info("Finance Tracker API started")
    yield


app = FastAPI(title="Finance Tracker API", version=__version__, lifespan=lifespan)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(users_router)
app.include_router(categories_router)
app.include_router(transactions_router)
app.include_router(budgets_router)
app.include_router(debts_router)
app.include_router(goals_router)
app.include_router(summary_router)
app.include_router(export_router)


@app.get("/")
def read_root():
    return "Server is running."
