"""API router for template management endpoints."""

from fastapi import APIRouter

from herald.api.health import router as health_router
from herald.api.intents import router as intents_router
from herald.api.templates import intent_templates_router, templates_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(intents_router, prefix="/outgoing-intents", tags=["Intents"])
api_router.include_router(
    intent_templates_router, prefix="/outgoing-intents", tags=["Message templates"]
)
api_router.include_router(templates_router, prefix="/message-templates", tags=["Message templates"])
