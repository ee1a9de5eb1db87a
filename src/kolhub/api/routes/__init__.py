"""Resource routers mounted under ``/api``."""

from kolhub.api.routes.campaigns import router as campaign_router
from kolhub.api.routes.kol_types import router as kol_type_router
from kolhub.api.routes.kols import router as kol_router
from kolhub.api.routes.reports import router as report_router
from kolhub.api.routes.users import router as user_router

ROUTERS = (user_router, kol_router, kol_type_router, campaign_router, report_router)

__all__ = [
    "ROUTERS",
    "campaign_router",
    "kol_router",
    "kol_type_router",
    "report_router",
    "user_router",
]
