from fastapi import APIRouter

from bodymap.catalog.marker_types import DEFAULT_MARKER_CATALOG
from bodymap.catalog.regions import DEFAULT_REGION_INDEX

router = APIRouter()


@router.get("/health")
def health_check() -> dict:
    """서비스 헬스 상태와 카탈로그 크기를 반환"""
    return {
        "status": "정상",
        "marker_types": len(DEFAULT_MARKER_CATALOG),
        "regions": len(DEFAULT_REGION_INDEX),
    }
