# resumesync/main.py
from __future__ import annotations
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .errors import AppError
from .services.github import SyncLocks
from .services.storage import build_storage

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app.state.storage = build_storage(settings)
    logger.info("%s started (export_mode=%s)", settings.app_name, settings.export_mode)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.state.sync_locks = SyncLocks()


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


from .routes import github as github_routes
from .routes import resumes as resumes_routes
from .routes import pages as pages_routes

app.include_router(github_routes.router)
app.include_router(resumes_routes.router)
app.include_router(pages_routes.router)

@app.get("/health")
def health():
    return {"ok": True, "app": settings.app_name}
