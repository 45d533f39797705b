from resilience_engine.spatial.geo import (
    BBox,
    Coordinate,
    bbox_to_string,
    estimate_distance_to_coast,
    is_coastal,
    search_bbox,
)

__all__ = [
    "BBox",
    "Coordinate",
    "bbox_to_string",
    "estimate_distance_to_coast",
    "is_coastal",
    "search_bbox",
]
