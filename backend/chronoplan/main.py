import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chronoplan.api.routes import conflicts, constraints, generator, health, timetable
from chronoplan.core.config import get_settings
from chronoplan.core.exceptions import AppError
from chronoplan.core.middleware import RequestSizeLimitMiddleware, RequestTimingMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()

logging.getLogger("chronoplan").setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("CHRONOPLAN START | api_prefix=%s", settings.api_prefix)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(RequestTimingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(generator.router, prefix=settings.api_prefix, tags=["generator"])
app.include_router(timetable.router, prefix=f"{settings.api_prefix}/timetable", tags=["timetable"])
app.include_router(conflicts.router, prefix=f"{settings.api_prefix}/conflicts", tags=["conflicts"])
app.include_router(constraints.router, prefix=f"{settings.api_prefix}/constraints", tags=["constraints"])
