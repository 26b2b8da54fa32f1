"""
Ledger import API application.

Wires the records router, CORS, error handlers and request logging into a
single FastAPI app. Run with ``uvicorn api.main:app`` or ``python -m api.main``.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.config import settings
from api.dependencies import SessionLocal, engine
from api.routers import records
from api.schemas.common import ErrorResponse, FailureResponse, HealthCheckResponse
from backend.models.schema import Base

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT,
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


def _error_body(error: str, request: Request, detail=None) -> dict:
    return ErrorResponse(error=error, detail=detail, path=request.url.path).model_dump(mode='json')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the records table on startup if it is missing."""
    logger.info(f"{settings.API_TITLE} v{settings.API_VERSION} starting")
    logger.info(f"Database host: {engine.url.host or engine.url.database or 'memory'}")
    logger.info(f"Import chunks of {settings.IMPORT_BATCH_SIZE}, "
                f"{'atomic' if settings.IMPORT_ATOMIC else 'per-chunk commit'}")

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Could not create tables: {e}")

    yield

    engine.dispose()
    logger.info("Stopped")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS
)


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    """Answer malformed bodies and query parameters with 400."""
    errors = jsonable_encoder(exc.errors())
    logger.warning(f"Rejected {request.method} {request.url.path}: {len(errors)} validation errors")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request body", request, detail={"errors": errors})
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)

    if settings.DEBUG:
        content = _error_body("Internal server error", request, detail={"message": str(exc)})
    else:
        content = FailureResponse(error="Internal server error").model_dump()

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


app.include_router(records.router, prefix=settings.API_PREFIX)


@app.get('/', include_in_schema=False)
async def index():
    """Service summary with the available endpoints."""
    return {
        'service': settings.API_TITLE,
        'version': settings.API_VERSION,
        'endpoints': {
            'import': f'POST {settings.API_PREFIX}/import',
            'records': f'GET {settings.API_PREFIX}/records/{{sheetName}}?page=&limit=',
            'health': 'GET /health'
        },
        'docs': app.docs_url
    }


@app.get('/health', response_model=HealthCheckResponse, tags=['health'])
def health_check():
    """
    Report whether the database answers a trivial query.

    **Example:**
    ```bash
    curl http://localhost:8000/health
    ```
    """
    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
        database = 'connected'
    except SQLAlchemyError as e:
        logger.error(f"Health check query failed: {e}")
        database = 'disconnected'

    return HealthCheckResponse(
        status='healthy' if database == 'connected' else 'unhealthy',
        timestamp=datetime.utcnow(),
        version=settings.API_VERSION,
        database=database
    )


@app.get(f'{settings.API_PREFIX}/ping', tags=['health'])
async def ping():
    """Liveness probe that never touches the database."""
    return {'ping': 'pong'}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(
        'api.main:app',
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
