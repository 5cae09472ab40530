"""Versioned API routers."""

from fastapi import APIRouter

from complia.api.routes import compliances, entities, holidays, tasks

api_router = APIRouter()
api_router.include_router(tasks.router)
api_router.include_router(entities.router)
api_router.include_router(compliances.router)
api_router.include_router(holidays.router)

__all__ = ["api_router"]
