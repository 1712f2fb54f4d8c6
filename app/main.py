import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import AppError, ValidationError
from app.core.logging_config import setup_logging
from app.api.v1.auth import router as auth_router
from app.api.v1.members import router as members_router

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("app.main")

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

# ajustar origins con la URL del cliente móvil (Expo)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    response.headers["X-Process-Time"] = f"{elapsed_ms / 1000:.6f}"
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        errors.setdefault(".".join(loc) or "body", []).append(err.get("msg", "Invalid value"))
    body = ValidationError(errors)
    return JSONResponse(status_code=body.status_code, content=body.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # no se devuelve el texto de la excepción al cliente
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "code": "INTERNAL_ERROR"})


app.include_router(auth_router)
app.include_router(members_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
