"""
app/api/routers package marker.
"""

from app.api.routers.aggregation_router import router as aggregation_router
from app.api.routers.data_router import router as data_router
from app.api.routers.health_router import router as health_router

__all__ = [
    "aggregation_router",
    "data_router",
    "health_router",
]
