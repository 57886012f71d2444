import os
import time
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from lifelog.routes import (
    auth_router,
    entries_router,
    tags_router,
    settings_router,
    dashboard_router,
)
from lifelog.database import init_db, DATABASE_URL
from lifelog.template_config import templates, utc_now

APP_NAME = "LifeLog"
APP_VERSION = "2.0.0"

# Create FastAPI app
app = FastAPI(
    title=APP_NAME,
    description="Personal journal with AI insights",
    version=APP_VERSION,
)

cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Length"],
    max_age=600,
)

# Include routers
app.include_router(auth_router)
app.include_router(entries_router)
app.include_router(tags_router)
app.include_router(settings_router)
app.include_router(dashboard_router)


@app.on_event("startup")
def on_startup():
    """Ensure DB is reachable and initialized at startup. Creates tables and
    system tags when missing. If initialization fails the app will raise and
    stop with a clear error message.
    """
    try:
        init_db()
    except Exception as e:
        # Re-raise as RuntimeError so the server fails loudly
        raise RuntimeError(
            f"Database initialization failed for DATABASE_URL={DATABASE_URL}: {e}"
        ) from e


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and query parameters."""
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    """Handle 500 errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
        for err in exc.errors()
    ]


@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "app": APP_NAME,
        "version": APP_VERSION,
        "timestamp": utc_now().isoformat(),
    }


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Single-page shell; everything else talks to /api."""
    return templates.TemplateResponse(
        request, "index.html", {"app_name": APP_NAME, "version": APP_VERSION}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lifelog.main:app", host="0.0.0.0", port=8000, reload=True)
