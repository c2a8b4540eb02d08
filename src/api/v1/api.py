from fastapi import APIRouter

from .catalog import router as catalog_router
from .health import router as health_router
from .model_management import router as model_management_router
from .results import router as results_router
from .runs import router as runs_router
from .scores import router as scores_router


# The dashboard runs locally against local inference servers; no auth layer.
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(catalog_router)
api_router.include_router(results_router)
api_router.include_router(scores_router)
api_router.include_router(runs_router)
api_router.include_router(model_management_router)
