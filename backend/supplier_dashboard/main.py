# backend/supplier_dashboard/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import importlib, logging

from supplier_dashboard.config import get_settings
from supplier_dashboard.db.session import maybe_bootstrap

settings = get_settings()
logging.basicConfig(level=settings.log_level)

# Create the snapshot table on import, before any request is served
maybe_bootstrap()

app = FastAPI(title="Supplier Dashboard API", version="0.1.0")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],  # includes Authorization / X-Company-ID
)

# Health check
@app.get("/api/health")
def health():
    return {"status": "ok"}

# ---- Router mounting helper (logs reasons for optional modules; no silent failures) ----
def _mount_optional(module_path: str):
    try:
        mod = importlib.import_module(module_path)
        router = getattr(mod, "router")
        app.include_router(router)
        logging.info("Mounted router: %s", module_path)
    except Exception as e:
        logging.warning("Skip router %s due to error: %s", module_path, e)

# ===== Required: analytics (fail fast to avoid a half-broken system) =====
from supplier_dashboard.api.analytics import router as analytics_router  # noqa: E402
app.include_router(analytics_router)
logging.info("Mounted router: supplier_dashboard.api.analytics")

# ===== Optional modules (mount if present; if missing or failing, log the reason) =====
_optional_modules = [
    "supplier_dashboard.api.dashboard",   # /api/v1/supplier/dashboard
]

for mod in _optional_modules:
    _mount_optional(mod)
