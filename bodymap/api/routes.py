from fastapi import APIRouter

from bodymap.api.admin import router as admin_router
from bodymap.api.avatar import router as avatar_router
from bodymap.api.catalog import router as catalog_router
from bodymap.api.health import router as health_router
from bodymap.api.markers import router as markers_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(markers_router, prefix="/v1", tags=["markers"])
router.include_router(catalog_router, prefix="/v1", tags=["catalog"])
router.include_router(avatar_router, prefix="/v1", tags=["avatar"])
router.include_router(admin_router, prefix="/admin", tags=["admin"])
