"""
Rentwise API
============================================
Property management backend: landlords list properties and units,
tenants apply for and pay for tenancies, admins oversee the platform.

Roles:
- admin: every property, tenancy and payment
- landlord: own properties, the tenancies on them, and tenancies they take part in
- tenant: tenancies they take part in

Optional records (agreements, maintenance requests) depend on the
deployment's tables; see GET /api/features.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from rentwise.api.auth import router as auth_router
from rentwise.api.dashboard import router as dashboard_router
from rentwise.api.payments import router as payments_router
from rentwise.api.profile import router as profile_router
from rentwise.api.properties import router as properties_router
from rentwise.api.tenancies import router as tenancies_router
from rentwise.config import get_settings
from rentwise.db.features import detect_features
from rentwise.db.schema import init_database
from rentwise.errors import register_error_handlers

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_path = init_database()
    features = detect_features(db_path)
    logger.info(f"[STARTUP] Database {db_path}, optional features: {features.model_dump()}")
    yield


app = FastAPI(
    title="Rentwise API",
    description="""
    Property management API for landlords, tenants and admins.

    ## Modules
    - **Properties**: Listings with units, images and ratings; search by name/address and rent window
    - **Tenancies**: Applications, approval/rejection, participants
    - **Payments**: History, timeframe summaries, payment methods
    - **Dashboard**: Role-specific overview (admin, landlord or tenant)

    ## Timeframes
    - **CM**: Current Month, **PM**: Previous Month, **YTD**: Year-to-Date
    - **L30** / **L7**: Last 30 / 7 days
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth_router, prefix="/api")
app.include_router(profile_router, prefix="/api")
app.include_router(properties_router, prefix="/api")
app.include_router(tenancies_router, prefix="/api")
app.include_router(payments_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")

app.mount(settings.media_url, StaticFiles(directory=settings.storage_dir, check_dir=False), name="media")


@app.get("/api/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Rentwise API",
        "version": "0.1.0",
        "docs": "/docs",
        "status": "running",
        "roles": ["admin", "landlord", "tenant"],
    }
