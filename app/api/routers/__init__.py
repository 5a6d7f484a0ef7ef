"""
app/api/routers package marker.
"""

from app.api.routers.live import router as live_router
from app.api.routers.reports import (
    build_report_router,
    disbursal_router,
    salary4sure_router,
)

__all__ = [
    "build_report_router",
    "disbursal_router",
    "live_router",
    "salary4sure_router",
]
