from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Query
from pydantic import BaseModel

from bodymap.catalog.marker_types import DEFAULT_MARKER_CATALOG
from bodymap.catalog.regions import find_closest_region, get_regions_for_view
from bodymap.services.resolver import resolve_type

router = APIRouter()


class ResolveBody(BaseModel):
    """해석할 문구"""

    text: str


@router.post("/resolve")
def resolve_mention(body: ResolveBody) -> dict:
    """문구를 마커 타입으로 해석, 일치 없으면 match=None"""
    resolved = resolve_type(body.text)
    return {"match": resolved.model_dump() if resolved else None}


@router.get("/marker-types")
def list_marker_types() -> list[dict]:
    return [definition.model_dump() for definition in DEFAULT_MARKER_CATALOG]


@router.get("/regions")
def list_regions(view: Literal["front", "back"] = "front") -> list[dict]:
    return [region.model_dump() for region in get_regions_for_view(view)]


@router.get("/regions/closest")
def closest_region(
    x: float = Query(..., ge=0, le=100),
    y: float = Query(..., ge=0, le=100),
    view: Literal["front", "back"] = "front",
) -> dict:
    """좌표에 가장 가까운 부위를 반환"""
    region = find_closest_region(x, y, view)
    return {"region": region.model_dump() if region else None}
