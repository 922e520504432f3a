"""
Tests for bounding box tiling
"""

import pytest
from pydantic import ValidationError

from rail_extractor.collectors.overpass import plan_tiles
from rail_extractor.countries import COUNTRIES
from rail_extractor.config import ExtractorConfig
from rail_extractor.models import BoundingBox


def box(*values):
    return BoundingBox.from_list(list(values))


def test_small_box_is_single_tile():
    bbox = box(0, 0, 10, 10)
    tiles = plan_tiles(bbox, 20)
    assert tiles == [bbox]


def test_box_exactly_tile_size_is_not_split():
    bbox = box(0, 0, 6, 6)
    assert plan_tiles(bbox, 6) == [bbox]


def test_grid_split_row_major():
    tiles = plan_tiles(box(0, 0, 10, 10), 6)
    assert [t.as_list() for t in tiles] == [
        [0, 0, 6, 6],
        [0, 6, 6, 10],
        [6, 0, 10, 6],
        [6, 6, 10, 10],
    ]


def test_one_long_axis_splits_only_that_axis():
    tiles = plan_tiles(box(0, 0, 6, 12), 6)
    assert [t.as_list() for t in tiles] == [[0, 0, 6, 6], [0, 6, 6, 12]]


@pytest.mark.parametrize("key", sorted(COUNTRIES))
def test_tiles_cover_country_box_without_gaps(key):
    country = COUNTRIES[key]
    size = ExtractorConfig().tile_size_for(country.size)
    bbox = country.bbox
    tiles = plan_tiles(bbox, size)

    for tile in tiles:
        assert tile.lat_span <= size + 1e-9
        assert tile.lon_span <= size + 1e-9
        assert bbox.south <= tile.south and tile.north <= bbox.north
        assert bbox.west <= tile.west and tile.east <= bbox.east

    rows = {}
    for tile in tiles:
        rows.setdefault((tile.south, tile.north), []).append(tile)

    bands = sorted(rows)
    assert bands[0][0] == bbox.south
    assert bands[-1][1] == bbox.north
    for (_, north), (south, _) in zip(bands, bands[1:]):
        assert south == pytest.approx(north)

    for row in rows.values():
        assert row[0].west == bbox.west
        assert row[-1].east == bbox.east
        for left, right in zip(row, row[1:]):
            assert right.west == pytest.approx(left.east)


def test_russia_uses_many_tiles():
    russia = COUNTRIES["russia"]
    tiles = plan_tiles(russia.bbox, ExtractorConfig().tile_size_for("xlarge"))
    # 28.81 x 72.69 degrees at 5 degrees: 6 rows by 15 columns
    assert len(tiles) == 90


def test_non_positive_tile_size_rejected():
    with pytest.raises(ValueError):
        plan_tiles(box(0, 0, 10, 10), 0)


def test_bounding_box_order_enforced():
    with pytest.raises(ValidationError):
        box(10, 0, 0, 10)
    with pytest.raises(ValidationError):
        box(0, 10, 10, 10)
