"""표시 우선순위 정렬과 상태 배지 분류

입력 마커 목록만 다루는 순수 함수들이다.
"""

from __future__ import annotations

from typing import Iterable

from bodymap.catalog.marker_types import DEFAULT_MARKER_CATALOG, MarkerTypeCatalog
from bodymap.core.config import BadgeLayout, load_app_config
from bodymap.models.display import BadgeGroup, BadgeGroups, BadgeSlot
from bodymap.models.marker import PatientMarker
from bodymap.utils.parsing import timestamp_key

CATEGORY_ORDER = (
    "critical",
    "neurological",
    "chronic",
    "moderate",
    "monitoring",
    "informational",
)

CATEGORY_WEIGHTS = {
    "critical": 100,
    "neurological": 80,
    "chronic": 60,
    "moderate": 40,
    "monitoring": 20,
    "informational": 10,
}

ATTENTION_BOOST = 25

RIGHT_BADGE_PATTERNS = ("allergy", "airway", "iv_access", "limb_alert")


def priority_score(marker: PatientMarker) -> int:
    """카테고리 가중치와 주의 플래그로 점수를 계산"""
    score = CATEGORY_WEIGHTS.get(marker.category, 0)
    if marker.requires_attention:
        score += ATTENTION_BOOST
    return score


def _recency(marker: PatientMarker):
    return max(timestamp_key(marker.created_at), timestamp_key(marker.updated_at))


def prioritize(markers: Iterable[PatientMarker]) -> list[PatientMarker]:
    """표시 우선순위 내림차순으로 정렬

    점수가 같으면 최근 생성/수정 순, 그것도 같으면 입력 순서를 유지한다.

    Args:
        markers: 마커 목록

    Returns:
        정렬된 새 목록
    """
    return sorted(
        markers,
        key=lambda marker: (priority_score(marker), _recency(marker)),
        reverse=True,
    )


def visible_markers(
    markers: Iterable[PatientMarker], view: str | None = None
) -> list[PatientMarker]:
    """활성이며 거부되지 않은 마커, view가 있으면 해당 보기만 반환"""
    return [
        marker
        for marker in markers
        if marker.is_visible and (view is None or marker.body_view == view)
    ]


def group_by_category(
    markers: Iterable[PatientMarker],
) -> dict[str, list[PatientMarker]]:
    """보이는 마커를 범례 순서의 카테고리별로 묶음, 빈 카테고리는 제외"""
    grouped: dict[str, list[PatientMarker]] = {key: [] for key in CATEGORY_ORDER}
    for marker in visible_markers(markers):
        grouped.setdefault(marker.category, []).append(marker)
    return {key: items for key, items in grouped.items() if items}


def badge_group(marker_type: str) -> BadgeGroup:
    """배지 타입의 둘레 배치 그룹을 결정

    Args:
        marker_type: 마커 타입 키

    Returns:
        top(코드 상태), right(격리/알레르기/기도/IV/사지), left(그 외 주의사항)
    """
    if marker_type.startswith("code_"):
        return "top"
    if marker_type.startswith("isolation_"):
        return "right"
    if any(pattern in marker_type for pattern in RIGHT_BADGE_PATTERNS):
        return "right"
    return "left"


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _slot_position(
    group: BadgeGroup, index: int, count: int, layout: BadgeLayout
) -> tuple[float, float]:
    if group == "top":
        offset = (index - (count - 1) / 2) * layout.top_spacing
        return _clamp(50.0 + offset), layout.top_y
    y = _clamp(layout.side_start_y + index * layout.side_spacing)
    if group == "left":
        return layout.left_x, y
    return layout.right_x, y


def classify_badges(
    markers: Iterable[PatientMarker],
    catalog: MarkerTypeCatalog = DEFAULT_MARKER_CATALOG,
    layout: BadgeLayout | None = None,
) -> BadgeGroups:
    """상태 배지 대상 마커를 세 그룹으로 나누고 슬롯 좌표를 계산

    활성이며 거부되지 않았고 타입 정의가 상태 배지인 마커만 포함한다.
    그룹 안의 순서는 입력 순서를 따른다.

    Args:
        markers: 마커 목록
        catalog: 마커 타입 카탈로그
        layout: 슬롯 배치 설정, 없으면 앱 설정값

    Returns:
        그룹별 배지 슬롯
    """
    layout = layout or load_app_config().badges
    buckets: dict[str, list[PatientMarker]] = {"top": [], "right": [], "left": []}
    for marker in visible_markers(markers):
        if catalog.is_status_badge(marker.marker_type):
            buckets[badge_group(marker.marker_type)].append(marker)

    slots: dict[str, list[BadgeSlot]] = {}
    for group, members in buckets.items():
        group_slots = []
        for index, marker in enumerate(members):
            definition = catalog.get(marker.marker_type)
            x, y = _slot_position(group, index, len(members), layout)
            group_slots.append(
                BadgeSlot(
                    marker_id=marker.id,
                    marker_type=marker.marker_type,
                    display_name=marker.display_name,
                    group=group,
                    index=index,
                    x=x,
                    y=y,
                    icon=definition.badge_icon,
                    color=definition.badge_color,
                    label=definition.badge_label,
                )
            )
        slots[group] = group_slots
    return BadgeGroups(**slots)
