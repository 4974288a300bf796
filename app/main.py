# app/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load /backend/.env (main.py is /backend/app/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from app.core.settings import settings
from app.api import api_router

from app.services.dashboard import Dashboard
from app.services.location import LocationSource
from app.services.map_view import MapSession

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Weatherman Backend", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        # Capacitor / iOS
        "capacitor://localhost",
        "ionic://localhost",

        # Local web dev
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────
# State holders (one device, one dashboard)
# ──────────────────────────────────────────────────────────────

_location = LocationSource()
_dashboard = Dashboard(settings=settings)
_session = MapSession(dashboard=_dashboard, location=_location, settings=settings)

# ──────────────────────────────────────────────────────────────
# Dependency providers
# ──────────────────────────────────────────────────────────────

def provide_location_source() -> LocationSource:
    return _location


def provide_map_session() -> MapSession:
    return _session


# ──────────────────────────────────────────────────────────────
# Dependency overrides
# ──────────────────────────────────────────────────────────────

from app.api import location as location_api
from app.api import dashboard as dashboard_api

app.dependency_overrides[location_api.get_location_source] = provide_location_source
app.dependency_overrides[location_api.get_map_session] = provide_map_session
app.dependency_overrides[dashboard_api.get_map_session] = provide_map_session

# Routes
app.include_router(api_router)

# ──────────────────────────────────────────────────────────────
# Shutdown
# ──────────────────────────────────────────────────────────────

@app.on_event("shutdown")
def shutdown():
    logger.info("[app] Shutting down: detaching map session")
    _session.close()
