from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from floodline.core.config import settings
from floodline.core.logging import setup_logging
from floodline.core.exceptions import (
    AppError,
    app_error_handler,
    global_exception_handler,
    http_exception_handler,
    store_exception_handler,
    validation_exception_handler,
)
from floodline.db.init_db import init_models
from floodline.db.session import engine
from floodline.services.scheduler import build_default_scheduler

# Setup Logging
setup_logging()
logger = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    The store must be reachable before the scheduler starts; a failed
    init aborts startup.
    """
    logger.info("startup", project=settings.PROJECT_NAME, environment=settings.ENVIRONMENT)
    await init_models()

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = build_default_scheduler()
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()
    await engine.dispose()
    logger.info("shutdown")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Flood disaster-response backend",
    lifespan=lifespan,
    docs_url=f"{settings.API_PREFIX}/docs",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
)

# Middleware: CORS
# Credentials are only allowed with an explicit origin list
if settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Exception Handlers
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(SQLAlchemyError, store_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Health Check
@app.get(f"{settings.API_PREFIX}/health", tags=["system"])
async def health_check():
    """
    Public health check endpoint for load balancers.
    """
    return {"status": "ok"}


from floodline.api.v1 import auth
from floodline.api.v1.public import floods, shelters, missing, help_requests, analytics
from floodline.api.v1.admin import dashboard as admin_dashboard, sync as admin_sync, stats as admin_stats

app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["auth"])
app.include_router(floods.router, prefix=f"{settings.API_PREFIX}/floods", tags=["floods"])
app.include_router(shelters.router, prefix=f"{settings.API_PREFIX}/shelters", tags=["shelters"])
app.include_router(missing.router, prefix=f"{settings.API_PREFIX}/missing", tags=["missing-persons"])
app.include_router(help_requests.router, prefix=f"{settings.API_PREFIX}/help", tags=["help-requests"])
app.include_router(analytics.router, prefix=f"{settings.API_PREFIX}/analytics", tags=["analytics"])
app.include_router(admin_dashboard.router, prefix=f"{settings.API_PREFIX}/admin", tags=["admin"])
app.include_router(admin_sync.router, prefix=f"{settings.API_PREFIX}/admin", tags=["admin-sync"])
app.include_router(admin_stats.router, prefix=f"{settings.API_PREFIX}/stats", tags=["stats"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("floodline.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
