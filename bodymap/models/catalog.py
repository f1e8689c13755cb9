from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BodyView = Literal["front", "back"]
MarkerCategory = Literal[
    "critical", "moderate", "informational", "monitoring", "chronic", "neurological"
]
Laterality = Literal["left", "right"]


class Point(BaseModel):
    """다이어그램 좌표(백분율)"""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., ge=0, le=100, description="가로 위치(%)")
    y: float = Field(..., ge=0, le=100, description="세로 위치(%)")


class Bounds(BaseModel):
    """부위 경계 상자"""

    model_config = ConfigDict(frozen=True)

    min_x: float
    max_x: float
    min_y: float
    max_y: float


class BodyRegion(BaseModel):
    """해부학적 부위 정의"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="부위 식별자")
    label: str = Field(..., description="표시 이름")
    view: BodyView = Field(..., description="앞/뒤 보기")
    center: Point = Field(..., description="기준 중심점")
    bounds: Bounds = Field(..., description="경계 상자")


class LateralityAdjustment(BaseModel):
    """좌/우 언급 시 대체 기본 위치"""

    model_config = ConfigDict(frozen=True)

    position: Point
    body_region: str | None = Field(default=None, description="대체 부위(선택)")


class MarkerTypeDefinition(BaseModel):
    """마커 타입 카탈로그 항목"""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="정규 마커 타입 키")
    display_name: str = Field(..., description="기본 표시 이름")
    category: MarkerCategory
    default_body_region: str
    default_body_view: BodyView = "front"
    default_position: Point
    keywords: tuple[str, ...] = Field(default=(), description="매칭 키워드")
    laterality_adjustments: dict[Laterality, LateralityAdjustment] | None = None
    is_status_badge: bool = False
    badge_icon: str | None = None
    badge_color: str | None = None
    badge_label: str | None = None
