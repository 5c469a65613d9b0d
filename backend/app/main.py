from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.middleware.exceptions import register_exception_handlers
from app.routers import alerts, health, loads, packaging
from app.services.scheduler import lifespan

app = FastAPI(
    title="PackTrack",
    description="Reusable packaging load tracking & site inventory",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(loads.router, prefix="/api/loads", tags=["loads"])
app.include_router(packaging.router, prefix="/api/packaging", tags=["packaging"])
app.include_router(alerts.router, prefix="/api/alerts", tags=["alerts"])
