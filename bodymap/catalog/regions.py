"""해부학적 부위 카탈로그와 최근접 부위 조회

좌표는 다이어그램 백분율(0~100)이다. 앞면(front)에서는 환자의 왼쪽이
화면 오른쪽에, 뒷면(back)에서는 화면 왼쪽에 온다.
"""

from __future__ import annotations

import math
from typing import Iterable

from bodymap.models.catalog import BodyRegion, BodyView, Bounds, Point


def _region(
    region_id: str,
    label: str,
    view: BodyView,
    center: tuple[float, float],
    bounds: tuple[float, float, float, float],
) -> BodyRegion:
    min_x, max_x, min_y, max_y = bounds
    return BodyRegion(
        id=region_id,
        label=label,
        view=view,
        center=Point(x=center[0], y=center[1]),
        bounds=Bounds(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y),
    )


BODY_REGIONS: tuple[BodyRegion, ...] = (
    # front
    _region("head", "Head", "front", (50, 6), (42, 58, 0, 12)),
    _region("neck", "Neck", "front", (50, 14), (44, 56, 12, 17)),
    _region("chest_right", "Right Chest", "front", (40, 27), (32, 49, 17, 38)),
    _region("chest_left", "Left Chest", "front", (60, 27), (51, 68, 17, 38)),
    _region("abdomen", "Abdomen", "front", (50, 45), (36, 64, 38, 55)),
    _region("pelvis", "Pelvis", "front", (50, 58), (38, 62, 55, 62)),
    _region("right_arm", "Right Upper Arm", "front", (28, 32), (20, 34, 18, 45)),
    _region("left_arm", "Left Upper Arm", "front", (72, 32), (66, 80, 18, 45)),
    _region("right_forearm", "Right Forearm", "front", (24, 50), (16, 32, 45, 58)),
    _region("left_forearm", "Left Forearm", "front", (76, 50), (68, 84, 45, 58)),
    _region("right_hand", "Right Hand", "front", (20, 62), (14, 26, 58, 66)),
    _region("left_hand", "Left Hand", "front", (80, 62), (74, 86, 58, 66)),
    _region("right_thigh", "Right Thigh", "front", (42, 70), (36, 49, 62, 80)),
    _region("left_thigh", "Left Thigh", "front", (58, 70), (51, 64, 62, 80)),
    _region("right_leg", "Right Lower Leg", "front", (42, 86), (36, 49, 80, 94)),
    _region("left_leg", "Left Lower Leg", "front", (58, 86), (51, 64, 80, 94)),
    _region("right_foot", "Right Foot", "front", (42, 97), (36, 49, 94, 100)),
    _region("left_foot", "Left Foot", "front", (58, 97), (51, 64, 94, 100)),
    # back
    _region("back_head", "Back of Head", "back", (50, 6), (42, 58, 0, 12)),
    _region("back_neck", "Back of Neck", "back", (50, 14), (44, 56, 12, 17)),
    _region("upper_back_left", "Left Upper Back", "back", (40, 27), (32, 49, 17, 38)),
    _region("upper_back_right", "Right Upper Back", "back", (60, 27), (51, 68, 17, 38)),
    _region("lower_back", "Lower Back", "back", (50, 45), (36, 64, 38, 52)),
    _region("sacrum", "Sacrum", "back", (50, 55), (44, 56, 52, 58)),
    _region("buttock_left", "Left Buttock", "back", (42, 61), (36, 49, 58, 66)),
    _region("buttock_right", "Right Buttock", "back", (58, 61), (51, 64, 58, 66)),
    _region("back_left_arm", "Left Arm (Back)", "back", (26, 40), (14, 34, 18, 66)),
    _region("back_right_arm", "Right Arm (Back)", "back", (74, 40), (66, 86, 18, 66)),
    _region("back_left_leg", "Left Leg (Back)", "back", (42, 80), (36, 49, 66, 94)),
    _region("back_right_leg", "Right Leg (Back)", "back", (58, 80), (51, 64, 66, 94)),
    _region("heel_left", "Left Heel", "back", (42, 97), (36, 49, 94, 100)),
    _region("heel_right", "Right Heel", "back", (58, 97), (51, 64, 94, 100)),
)


def region_contains(region: BodyRegion, x: float, y: float) -> bool:
    """좌표가 부위 경계 상자 안에 있는지 여부"""
    bounds = region.bounds
    return bounds.min_x <= x <= bounds.max_x and bounds.min_y <= y <= bounds.max_y


class RegionIndex:
    """부위 목록 위의 불변 색인"""

    def __init__(self, regions: Iterable[BodyRegion]) -> None:
        self._regions = tuple(regions)
        self._by_id = {region.id: region for region in self._regions}

    def __len__(self) -> int:
        return len(self._regions)

    def get(self, region_id: str) -> BodyRegion | None:
        """식별자로 부위를 조회

        Args:
            region_id: 부위 식별자

        Returns:
            부위 또는 None
        """
        return self._by_id.get(region_id)

    def for_view(self, view: str) -> list[BodyRegion]:
        """보기에 속한 부위 목록을 카탈로그 순서대로 반환"""
        return [region for region in self._regions if region.view == view]

    def has_region(self, region_id: str, view: str) -> bool:
        """부위가 해당 보기의 카탈로그에 있는지 여부"""
        region = self._by_id.get(region_id)
        return region is not None and region.view == view

    def find_closest(self, x: float, y: float, view: str) -> BodyRegion | None:
        """중심점까지 유클리드 거리가 가장 가까운 부위를 반환

        거리가 같으면 카탈로그에서 먼저 나온 부위를 반환한다.

        Args:
            x: 가로 좌표
            y: 세로 좌표
            view: 앞/뒤 보기

        Returns:
            최근접 부위, 해당 보기의 부위가 없으면 None
        """
        closest: BodyRegion | None = None
        best = math.inf
        for region in self.for_view(view):
            distance = math.hypot(x - region.center.x, y - region.center.y)
            if distance < best:
                best = distance
                closest = region
        return closest


DEFAULT_REGION_INDEX = RegionIndex(BODY_REGIONS)


def find_closest_region(x: float, y: float, view: str) -> BodyRegion | None:
    """기본 카탈로그에서 최근접 부위를 조회"""
    return DEFAULT_REGION_INDEX.find_closest(x, y, view)


def get_region(region_id: str) -> BodyRegion | None:
    """기본 카탈로그에서 부위를 조회"""
    return DEFAULT_REGION_INDEX.get(region_id)


def get_regions_for_view(view: str) -> list[BodyRegion]:
    """기본 카탈로그에서 보기별 부위 목록을 조회"""
    return DEFAULT_REGION_INDEX.for_view(view)
