"""FastAPI endpoints.

Endpoint groups: index + health, the wire endpoint (POST /api, one tagged
message per request), the visit counter, and the LLM streaming proxy.
Routes declare full paths because the wire endpoint lives at /api itself.
"""

from fastapi import APIRouter

from .api import router as api_router
from .counter import router as counter_router
from .health import router as health_router
from .llm import router as llm_router

router = APIRouter()
router.include_router(health_router)
router.include_router(api_router)
router.include_router(counter_router)
router.include_router(llm_router)
