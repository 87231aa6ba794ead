import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

import errors
import models
from config import settings
from database import Base, engine, get_db
from logging_config import setup_logging
from rate_limiter import limiter
from routers import books, profile, reviews, users

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("Starting up bookshelf catalog...")
    Base.metadata.create_all(bind=engine)
    yield
    # Shutdown logic
    logger.info("Shutting down bookshelf catalog...")

app = FastAPI(
    title="Bookshelf Catalog",
    description="Shared book catalog with star ratings and reviews",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(errors.BookshelfError)
async def bookshelf_error_handler(request: Request, exc: errors.BookshelfError):
    headers = None
    if isinstance(exc, errors.UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, errors.TransientError):
        headers = {"Retry-After": "1"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=headers,
    )


@app.exception_handler(OperationalError)
async def storage_error_handler(request: Request, exc: OperationalError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return await bookshelf_error_handler(request, errors.TransientError())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    logger.info(
        "%s %s -> %s (%.2f ms) ip=%s",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
        request.client.host if request.client else "unknown",
    )
    return response

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check endpoint
@app.get("/health", tags=["System"])
def health_check(db: Session = Depends(get_db)):
    health_status = {"status": "healthy", "service": "bookshelf-catalog", "components": {}}

    # Check database
    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = "connected"
    except OperationalError as e:
        logger.error(f"DB health check failed: {e}")
        health_status["components"]["database"] = "unhealthy"
        health_status["status"] = "degraded"

    if health_status["status"] != "healthy":
         raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=health_status
        )
    return health_status

app.include_router(users.router)
app.include_router(books.router)
app.include_router(reviews.router)
app.include_router(profile.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
