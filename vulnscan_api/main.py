# vulnscan_api/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vulnscan_api.api.router import api_router
from vulnscan_api.core.config import settings
from vulnscan_api.db.base import Base
from vulnscan_api.db.init_db import init_admin_if_empty
from vulnscan_api.db.session import SessionLocal, engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tables are created directly; there is no migration tool
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        init_admin_if_empty(db)
    finally:
        db.close()
    logger.info(f"{settings.PROJECT_NAME} started, Acunetix at {settings.ACUNETIX_API_URL}")
    yield
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Authenticated REST gateway for running and tracking Acunetix scans.",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = {"success": False}
    if isinstance(exc.detail, dict):
        content.update(exc.detail)
    else:
        content["message"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": "Invalid request", "errors": errors},
    )


app.include_router(api_router)
