import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import (
    courses,
    departments,
    enrollments,
    health,
    instructors,
    students,
)
from app.core.config import get_settings
from app.core.exceptions import AppError
from app.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ensure_runtime_schema_compatibility()
    logger.info("%s started", settings.project_name)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder({"message": exc.message, "details": exc.details}),
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(departments.router, prefix=f"{settings.api_prefix}/departments", tags=["departments"])
app.include_router(courses.router, prefix=f"{settings.api_prefix}/courses", tags=["courses"])
app.include_router(instructors.router, prefix=f"{settings.api_prefix}/instructors", tags=["instructors"])
app.include_router(students.router, prefix=f"{settings.api_prefix}/students", tags=["students"])
app.include_router(enrollments.router, prefix=f"{settings.api_prefix}/enrollments", tags=["enrollments"])
