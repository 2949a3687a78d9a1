"""
Maps module - static route preview rendering
"""

from .renderer import (
    MapRenderer, MapRenderError, TileGrid,
    build_mapbox_url, compute_tile_grid, find_zoom_level, normalize_route_segments,
)

__all__ = [
    'MapRenderer', 'MapRenderError', 'TileGrid',
    'build_mapbox_url', 'compute_tile_grid', 'find_zoom_level', 'normalize_route_segments',
]
