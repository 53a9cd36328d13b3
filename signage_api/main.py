import os
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from signage_api.db import Base, engine, ensure_sqlite_schema
from signage_api.api import player
from signage_api.services.clock import SIGNAGE_TIMEZONE

API_KEY = os.getenv("SIGNAGE_API_KEY", "").strip()
SERVER_PORT = int(os.getenv("SIGNAGE_SERVER_PORT", "8000"))
LOG_LEVEL = (os.getenv("SIGNAGE_LOG_LEVEL", "INFO") or "INFO").strip().upper()
QUIET_ACCESS_LOG = os.getenv("SIGNAGE_QUIET_ACCESS_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}
# Device routes authenticate with their own bearer token.
API_KEY_EXEMPT_PREFIXES = ("/docs", "/openapi.json", "/redoc", "/healthz", "/player")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if QUIET_ACCESS_LOG:
    # Every display polls /player/config; keep warning/error lines only.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


app = FastAPI(title="signage-api")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_events() -> None:
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()
    logger.info("signage-api ready (timezone=%s)", SIGNAGE_TIMEZONE)


@app.get("/")
def root():
    return {
        "ok": True,
        "service": "signage-api",
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "timezone": SIGNAGE_TIMEZONE,
        "docs": "/docs",
    }

@app.get("/healthz")
def healthz():
    return {"ok": True, "server_port": SERVER_PORT}


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if not API_KEY:
        return await call_next(request)
    path = request.url.path
    if path.startswith(API_KEY_EXEMPT_PREFIXES):
        return await call_next(request)
    if request.headers.get("X-API-Key") != API_KEY:
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    return await call_next(request)

app.include_router(player.router)
