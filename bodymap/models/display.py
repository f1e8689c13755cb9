from typing import Literal

from pydantic import BaseModel, Field

from bodymap.models.catalog import BodyView, MarkerCategory, Point

BadgeGroup = Literal["top", "right", "left"]


class ResolvedType(BaseModel):
    """자유 텍스트 해석 결과"""

    type: str
    display_name: str
    category: MarkerCategory
    body_region: str
    body_view: BodyView
    adjusted_position: Point
    matched_keyword: str
    laterality: Literal["left", "right"] | None = None


class BadgeSlot(BaseModel):
    """둘레 상태 배지 슬롯"""

    marker_id: str
    marker_type: str
    display_name: str
    group: BadgeGroup
    index: int
    x: float
    y: float
    icon: str | None = None
    color: str | None = None
    label: str | None = None


class BadgeGroups(BaseModel):
    """배지 그룹별 슬롯 목록"""

    top: list[BadgeSlot] = Field(default_factory=list)
    right: list[BadgeSlot] = Field(default_factory=list)
    left: list[BadgeSlot] = Field(default_factory=list)

    def all_slots(self) -> list[BadgeSlot]:
        return [*self.top, *self.right, *self.left]
