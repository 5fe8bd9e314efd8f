"""Main FastAPI application"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from appconfig.api.v1 import applications
from appconfig.core.config import logger, settings
from appconfig.core.errors import ApplicationServiceError, ErrorKind, ValidationError
from appconfig.middleware import StructuredLoggingMiddleware
from appconfig.models import close_db, init_db

ERROR_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORE: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Application Config Service...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Version: {settings.version}")

    try:
        await init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        raise

    yield

    logger.info("Shutting down Application Config Service...")
    await close_db()


app = FastAPI(
    title="Application Config Service",
    description="Applications, their config files, jars and tags",
    version=settings.version,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(StructuredLoggingMiddleware)


@app.exception_handler(ApplicationServiceError)
async def service_error_handler(request: Request, exc: ApplicationServiceError):
    """Map service errors to HTTP responses"""
    status_code = ERROR_STATUS_CODES[exc.kind]
    if status_code >= 500:
        logger.error(f"Service error on {request.url.path}: {exc}")
    else:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests with the same body as service validation errors"""
    errors = [
        {"loc": [str(part) for part in error["loc"]], "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    first = errors[0] if errors else {"loc": ["request"], "msg": "invalid request"}
    field = ".".join(first["loc"][1:]) or first["loc"][0]

    return await service_error_handler(
        request,
        ValidationError(field=field, reason=first["msg"], details={"errors": errors}),
    )


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return JSONResponse(
        content={
            "status": "healthy",
            "service": "appconfig",
            "version": settings.version,
            "environment": settings.environment,
        }
    )


app.include_router(applications.router, prefix="/api/v1/applications", tags=["Applications"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "appconfig.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
