import os
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from machinehub.db import Base, engine, check_connection
from machinehub.api import machines
from machinehub.errors import InvalidBodyError, MachineHubError
from machinehub.models import error_log, machine_config  # noqa: F401  registers tables
from machinehub.services import storage
from machinehub.services.images import PUBLIC_PREFIX

LOG_LEVEL = os.getenv("MACHINEHUB_LOG_LEVEL", "INFO").strip().upper()
QUIET_ACCESS_LOG = os.getenv("MACHINEHUB_QUIET_ACCESS_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}
CORS_ORIGINS = [
    origin.strip() for origin in os.getenv("MACHINEHUB_CORS_ORIGINS", "*").split(",") if origin.strip()
]

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("machinehub")

if QUIET_ACCESS_LOG:
    # Devices poll constantly; keep warning/error lines only.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

Base.metadata.create_all(bind=engine)
storage.ensure_storage()

app = FastAPI(title="machinehub")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(MachineHubError)
async def machinehub_error_handler(request: Request, exc: MachineHubError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc.message)
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    error = InvalidBodyError(_validation_message(exc))
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, error.message)
    return JSONResponse(error.to_payload(), status_code=error.status_code)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "InternalServerError", "message": "Internal server error", "details": None},
        status_code=500,
    )


@app.get("/")
def root():
    return {
        "ok": True,
        "service": "machinehub",
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
    }


@app.get("/healthz")
def healthz():
    check_connection()
    return {"ok": True}


@app.on_event("startup")
def startup_events() -> None:
    check_connection()


app.include_router(machines.router)

app.mount(PUBLIC_PREFIX, StaticFiles(directory=storage.STORED_DIR), name="stored")
