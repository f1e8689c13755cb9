import pytest

from bodymap.catalog.regions import (
    BODY_REGIONS,
    RegionIndex,
    find_closest_region,
    get_region,
    get_regions_for_view,
    region_contains,
)
from bodymap.models.catalog import BodyRegion, Bounds, Point


def _region(region_id: str, view: str, x: float, y: float) -> BodyRegion:
    return BodyRegion(
        id=region_id,
        label=region_id,
        view=view,
        center=Point(x=x, y=y),
        bounds=Bounds(min_x=x - 5, max_x=x + 5, min_y=y - 5, max_y=y + 5),
    )


def test_region_ids_are_unique():
    ids = [region.id for region in BODY_REGIONS]
    assert len(ids) == len(set(ids))


@pytest.mark.parametrize("view", ["front", "back"])
def test_closest_region_matches_query_view(view):
    for x in range(0, 101, 10):
        for y in range(0, 101, 10):
            region = find_closest_region(x, y, view)
            assert region is not None
            assert region.view == view


def test_closest_region_is_deterministic():
    first = find_closest_region(47.3, 31.9, "front")
    for _ in range(5):
        assert find_closest_region(47.3, 31.9, "front").id == first.id


def test_closest_region_at_center_returns_that_region():
    assert find_closest_region(50, 58, "front").id == "pelvis"
    assert find_closest_region(50, 55, "back").id == "sacrum"


def test_closest_region_tie_uses_catalog_order():
    index = RegionIndex([_region("a", "front", 40, 50), _region("b", "front", 60, 50)])
    assert index.find_closest(50, 50, "front").id == "a"

    reversed_index = RegionIndex(
        [_region("b", "front", 60, 50), _region("a", "front", 40, 50)]
    )
    assert reversed_index.find_closest(50, 50, "front").id == "b"


def test_closest_region_without_regions_for_view_returns_none():
    index = RegionIndex([_region("a", "front", 40, 50)])
    assert index.find_closest(50, 50, "back") is None


def test_get_region_and_view_listing():
    region = get_region("chest_left")
    assert region is not None
    assert region.view == "front"
    assert get_region("nope") is None

    back = get_regions_for_view("back")
    assert back
    assert all(item.view == "back" for item in back)
    assert [item.id for item in back] == [
        item.id for item in BODY_REGIONS if item.view == "back"
    ]


def test_has_region_checks_view():
    index = RegionIndex(BODY_REGIONS)
    assert index.has_region("sacrum", "back")
    assert not index.has_region("sacrum", "front")
    assert not index.has_region("unknown", "front")


def test_region_contains_bounds():
    region = get_region("abdomen")
    assert region_contains(region, 50, 45)
    assert not region_contains(region, 90, 90)
