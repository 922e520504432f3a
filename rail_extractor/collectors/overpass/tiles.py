"""
Tile planning

Splits a bounding box into a grid of smaller boxes so each Overpass query
stays within the server's time and size limits.
"""

import math
from typing import List

from ...models import BoundingBox


def plan_tiles(bbox: BoundingBox, tile_size_deg: float) -> List[BoundingBox]:
    """
    Split a bounding box into tiles of at most tile_size_deg per axis

    Boxes that already fit are returned unchanged as a single tile. Otherwise
    the grid starts at the south-west corner and the last row/column is
    clipped to the box edge. Tiles are ordered row by row, south to north,
    west to east within a row.

    Args:
        bbox: Box to split
        tile_size_deg: Maximum tile span in degrees

    Returns:
        List of tiles covering bbox with no gaps
    """
    if tile_size_deg <= 0:
        raise ValueError(f"tile_size_deg must be positive, got {tile_size_deg}")

    if bbox.lat_span <= tile_size_deg and bbox.lon_span <= tile_size_deg:
        return [bbox]

    rows = math.ceil(bbox.lat_span / tile_size_deg)
    cols = math.ceil(bbox.lon_span / tile_size_deg)

    tiles = []
    for i in range(rows):
        south = bbox.south + i * tile_size_deg
        if south >= bbox.north:
            break
        north = min(south + tile_size_deg, bbox.north)
        for j in range(cols):
            west = bbox.west + j * tile_size_deg
            if west >= bbox.east:
                break
            east = min(west + tile_size_deg, bbox.east)
            tiles.append(BoundingBox(south=south, west=west, north=north, east=east))

    return tiles
