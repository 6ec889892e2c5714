from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from unispace.config import settings
from unispace.db import init_database
from unispace.errors import ConflictError, UniSpaceError
from unispace.routers import auth, bookings, campuses, reports, rooms, schedules
from unispace.workers.completion import BookingCompletionWorker
import logging

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database and the completion worker"
    init_database()
    worker = None
    if settings.completion_worker_enabled:
        worker = BookingCompletionWorker()
        worker.start()
    yield
    if worker is not None:
        await worker.stop()


app = FastAPI(
    lifespan=lifespan,
    title="UniSpace",
    description="University room booking with conflict-checked bookings and recurring schedules.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)


@app.exception_handler(UniSpaceError)
async def unispace_error_handler(request: Request, exc: UniSpaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    content = {"detail": exc.message}
    if isinstance(exc, ConflictError):
        content["conflicts"] = [conflict.describe() for conflict in exc.conflicts]
    return JSONResponse(status_code=exc.status_code, content=content)


app.include_router(auth.router)
app.include_router(campuses.router)
app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(schedules.router)
app.include_router(reports.router)
