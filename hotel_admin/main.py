from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hotel_admin.api import auth, bookings, company, employees, payments, providers, services, stocks
from hotel_admin.core.config import settings
from hotel_admin.core.exceptions import DomainException
from hotel_admin.core.logger import logger, setup_logging
from hotel_admin.models.common import utcnow
from hotel_admin.services.db_service import DocumentStore, build_store

setup_logging()


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")
        app.state.store = store if store is not None else build_store(settings)
        yield
        # Shutdown
        logger.info("🛑 Shutting down backend")

    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0", lifespan=lifespan)
    # Available before startup for clients that skip the lifespan
    app.state.store = store

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        if exc.status_code >= 500:
            logger.error(f"🔥 {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"⚠️ Invalid payload on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid payload"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Server error"})

    # Include routers
    for module, tag in (
        (auth, "Auth"),
        (bookings, "Bookings"),
        (services, "Services"),
        (providers, "Providers"),
        (payments, "Payments"),
        (stocks, "Stocks"),
        (employees, "Employees"),
        (company, "Company"),
    ):
        app.include_router(module.router, prefix=settings.API_PREFIX, tags=[tag])

    @app.get("/")
    async def health_check():
        return {"status": "active", "time": utcnow().isoformat()}

    @app.get("/health")
    async def health_check_std():
        return {"status": "ok", "environment": settings.ENVIRONMENT, "timestamp": utcnow().isoformat()}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hotel_admin.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
