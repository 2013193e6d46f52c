import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import (
    BaseCustomException, ValidationError, NotFoundError, InvalidStateError,
    ConflictError, RetryExhaustedError, create_error_response
)
from clinic_scheduler.api.v1.api import api_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# The domain layer raises typed errors; only this module knows HTTP codes
STATUS_CODES = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    RetryExhaustedError: status.HTTP_409_CONFLICT,
}

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(BaseCustomException)
async def custom_exception_handler(request: Request, exc: BaseCustomException):
    status_code = STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=create_error_response(exc))


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/health")
def health_check():
    return {"status": "ok"}
