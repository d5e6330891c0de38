"""FastAPI application entry point."""
import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from contextlib import asynccontextmanager

from alumni_tracer.config import get_settings
from alumni_tracer.database import engine
from alumni_tracer.version import APP_VERSION
from alumni_tracer.routers import health, surveys
from alumni_tracer.utils.exceptions import (
    AuthenticationRequired,
    EmailAlreadyExists,
    InvalidInvitation,
    QuestionNotFound,
    RequiredFieldEmpty,
    SessionAlreadyCompleted,
    SessionNotFound,
    SurveyFlowError,
    SurveyUnavailable,
)
from alumni_tracer.utils.passwords import PasswordValidationError

logs_dir = Path(os.getenv("ALUMNI_TRACER_LOG_DIR", "logs"))
logs_dir.mkdir(exist_ok=True)

log_file = logs_dir / "alumni_tracer.log"
sql_log_file = logs_dir / "alumni_tracer_sql.log"
api_log_file = logs_dir / "alumni_tracer_api.log"

# 1 MB per file, 5 backups
rotating_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

sql_rotating_handler = RotatingFileHandler(sql_log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
sql_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

api_rotating_handler = RotatingFileHandler(api_log_file, maxBytes=2 * 1024 * 1024, backupCount=15, encoding='utf-8')
api_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        rotating_handler,
    ],
    force=True,
)

logger = logging.getLogger(__name__)

api_logger = logging.getLogger("alumni_tracer.api")
api_logger.handlers.clear()
api_logger.addHandler(api_rotating_handler)
api_logger.setLevel(logging.INFO)
api_logger.propagate = False

sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
sqlalchemy_logger.handlers.clear()
sqlalchemy_logger.addHandler(sql_rotating_handler)
sqlalchemy_logger.setLevel(logging.WARNING)
sqlalchemy_logger.propagate = False


class SQLTransactionFilter(logging.Filter):
    """Drop transaction chatter and flatten multi-line statements."""

    def filter(self, record):
        if record.levelno == logging.INFO:
            message = record.getMessage()
            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False
            if any(keyword in message for keyword in ['SELECT', 'UPDATE', 'INSERT']):
                record.msg = ' '.join(message.split())
                record.args = ()
        return True


sqlalchemy_logger.addFilter(SQLTransactionFilter())

settings = get_settings()

ERROR_STATUS_CODES: dict[type[SurveyFlowError], int] = {
    SurveyUnavailable: 404,
    InvalidInvitation: 403,
    AuthenticationRequired: 401,
    SessionNotFound: 404,
    SessionAlreadyCompleted: 400,
    QuestionNotFound: 404,
    RequiredFieldEmpty: 422,
    EmailAlreadyExists: 409,
}


def status_code_for(exc: SurveyFlowError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]
    return 400


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Manage application startup and shutdown tasks."""
    logger.info("=" * 60)
    logger.info("Alumni Tracer API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info("=" * 60)

    yield

    await engine.dispose()
    logger.info("Alumni Tracer API Shutting Down")


app = FastAPI(
    title=settings.app_name,
    description="Alumni survey responses and registration",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(SurveyFlowError)
async def survey_flow_exception_handler(request: Request, exc: SurveyFlowError):
    """Translate domain errors into their HTTP status with a stable code."""
    status_code = status_code_for(exc)
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.message})")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.code, "message": exc.message},
    )


@app.exception_handler(PasswordValidationError)
async def password_validation_exception_handler(request: Request, exc: PasswordValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": "invalid_password", "message": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with user-friendly messages."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = " -> ".join(str(x) for x in loc[1:]) if len(loc) > 1 else "unknown field"
        errors.append({
            "field": field_path,
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": errors,
        },
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with status and timing to the API log file."""
    start_time = time.time()

    client_ip = request.client.host if request.client else "unknown"
    user_agent = request.headers.get("user-agent", "unknown")
    method = request.method
    path = request.url.path
    request_id = f"{method}:{path}:{int(start_time * 1000) % 100000}"

    api_logger.info(f">> {request_id} | START | {method} {path} | IP: {client_ip} | UA: {user_agent[:50]}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        api_logger.error(
            f"<< {request_id} | EXCEPTION | {method} {path} | "
            f"Error: {str(e)[:100]} | Time: {process_time:.3f}s | IP: {client_ip}"
        )
        raise

    process_time = time.time() - start_time
    api_logger.info(
        f"<< {request_id} | COMPLETE | {method} {path} | "
        f"Status: {response.status_code} | Time: {process_time:.3f}s | IP: {client_ip}"
    )
    return response


allowed_origins = [origin for origin in os.getenv("ALLOWED_ORIGINS", "").split(",") if origin]
if not allowed_origins:
    allowed_origins = [
        settings.frontend_url,
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(surveys.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "message": settings.app_name,
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs": "/docs",
    }
