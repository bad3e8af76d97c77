# Import all models to ensure they are registered with SQLModel
from app.models import catalog, sales, purchasing, finance, store, sync
from app.core import config, auth as core_auth, deps
from app.database import engine

__all__ = [
    "catalog",
    "sales",
    "purchasing",
    "finance",
    "store",
    "sync",
    "config",
    "core_auth",
    "deps",
    "engine",
]
