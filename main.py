from __future__ import annotations
import datetime as dt
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.responses import JSONResponse

from api_router import router
from kigaku_core.sekki_table import get_default_table
from middleware import LoggingMiddleware, RequestIDMiddleware
from schemas import ErrorDetail, ErrorEnvelope, ErrorResponse
from settings import (
    APP_NAME,
    APP_VERSION,
    CORS_ALLOW_ORIGINS,
    GZIP_MIN_SIZE,
    LOG_LEVEL,
    REQUEST_LOGGING,
    TRUSTED_HOSTS,
)

logger = logging.getLogger("kigaku")

ERROR_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "UNPROCESSABLE_ENTITY",
    500: "SERVER_ERROR",
}


def _utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z")


def _error(status_code: int, message: str, details: Optional[List[ErrorDetail]] = None) -> JSONResponse:
    code = ERROR_CODES.get(status_code, f"HTTP_{status_code}")
    body = ErrorResponse(error=ErrorEnvelope(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("[startup] %s v%s", APP_NAME, APP_VERSION)
    # load the solar-term table before the first request
    table = get_default_table().load()
    low, high = table.supported_year_range()
    logger.info("[startup] solar-term table: %d years, range %d-%d", len(table), low, high)
    yield
    logger.info("[shutdown] %s stopped", APP_NAME)


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="Nine Star Ki year, month and day stars resolved on solar-term boundaries.",
    lifespan=lifespan,
)

# --- Middleware ---
app.add_middleware(RequestIDMiddleware)
app.add_middleware(LoggingMiddleware, mode=REQUEST_LOGGING)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS or ["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=GZIP_MIN_SIZE)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=TRUSTED_HOSTS or ["*"])


# --- Errors -> {"error": {...}} ---
@app.exception_handler(StarletteHTTPException)
async def on_http_exception(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    return _error(exc.status_code, detail if isinstance(detail, str) and detail else str(exc))


@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    details = [
        ErrorDetail(field=".".join(str(p) for p in e.get("loc", ())), issue=e.get("msg"))
        for e in exc.errors()
    ]
    return _error(422, "Validation error", details)


@app.exception_handler(Exception)
async def on_any_error(request: Request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return _error(500, str(exc))


@app.get("/")
async def landing():
    return {"service": APP_NAME, "version": APP_VERSION, "ts": _utc_now()}


# --- Liveness/Readiness ---
@app.get("/healthz")
async def healthz():
    return {"ok": True, "ts": _utc_now()}


@app.get("/readyz")
async def readyz():
    table = get_default_table()
    if not table.is_loaded:
        return {"ready": False, "years": 0}
    low, high = table.supported_year_range()
    return {"ready": True, "years": len(table), "yearRange": [low, high]}


app.include_router(router)


if __name__ == "__main__":
    try:
        import uvicorn  # type: ignore
    except ImportError:
        raise SystemExit("uvicorn is required to run the dev server.")
    uvicorn.run("main:app", host="127.0.0.1", port=8787, reload=True)
