#!/usr/bin/env python3
"""
Map Renderer - static route preview images

Renders through the Mapbox Static Images API when an access token is
configured and falls back to compositing OpenStreetMap tiles locally.
"""
import asyncio
import io
import json
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx
from PIL import Image, ImageDraw

from ..const import (
    CANVAS_COLOR,
    DEFAULT_MAP_HEIGHT,
    DEFAULT_MAP_WIDTH,
    DEFAULT_TILE_URL,
    DEFAULT_TILE_USER_AGENT,
    END_MARKER_COLOR,
    FILLER_TILE_COLOR,
    MAP_PADDING,
    MAPBOX_MAX_POINTS,
    MAPBOX_PADDING,
    MAPBOX_STATIC_URL,
    MAX_ZOOM,
    MIN_ZOOM,
    ROUTE_COLOR,
    START_MARKER_COLOR,
    TILE_SIZE,
)
from ..geometry import Coordinate, downsample_segments, project

logger = logging.getLogger(__name__)

MARKER_RADIUS = 5
MARKER_OUTLINE_WIDTH = 2
ROUTE_WIDTH = 4


class MapRenderError(Exception):
    """Raised when a map service responds with an unusable result"""


@dataclass
class TileGrid:
    """Pixel window and covering tile range for one render"""
    zoom: int
    top_left_x: float
    top_left_y: float
    start_tile_x: int
    end_tile_x: int
    start_tile_y: int
    end_tile_y: int

    def tiles(self) -> List[Tuple[int, int]]:
        return [
            (tile_x, tile_y)
            for tile_y in range(self.start_tile_y, self.end_tile_y + 1)
            for tile_x in range(self.start_tile_x, self.end_tile_x + 1)
        ]

    def offset(self, tile_x: int, tile_y: int) -> Tuple[int, int]:
        return (
            round(tile_x * TILE_SIZE - self.top_left_x),
            round(tile_y * TILE_SIZE - self.top_left_y),
        )

    def to_pixel(self, coordinate: Coordinate) -> Tuple[float, float]:
        x, y = project(coordinate, self.zoom)
        return x - self.top_left_x, y - self.top_left_y


def normalize_route_segments(coordinates: Sequence[Coordinate],
                             route_segments: Optional[Sequence[Sequence[Coordinate]]] = None
                             ) -> List[List[Coordinate]]:
    """Keep segments with at least two points, else fall back to the single route"""
    if route_segments:
        valid = [list(segment) for segment in route_segments if len(segment) >= 2]
        if valid:
            return valid

    if len(coordinates) >= 2:
        return [list(coordinates)]

    return []


def _bounds_are_finite(coordinates: Sequence[Coordinate]) -> bool:
    lats = [coordinate[0] for coordinate in coordinates]
    lngs = [coordinate[1] for coordinate in coordinates]
    return all(math.isfinite(value) for value in (min(lats), max(lats), min(lngs), max(lngs)))


def _projected_extent(coordinates: Sequence[Coordinate], zoom: int) -> Tuple[float, float, float, float]:
    projected = [project(coordinate, zoom) for coordinate in coordinates]
    xs = [point[0] for point in projected]
    ys = [point[1] for point in projected]
    return min(xs), max(xs), min(ys), max(ys)


def find_zoom_level(coordinates: Sequence[Coordinate], width: int, height: int,
                    padding: int = MAP_PADDING) -> int:
    """Largest zoom in [MIN_ZOOM, MAX_ZOOM] at which the route fits inside the padded viewport"""
    for zoom in range(MAX_ZOOM, MIN_ZOOM - 1, -1):
        min_x, max_x, min_y, max_y = _projected_extent(coordinates, zoom)
        if max_x - min_x <= width - padding * 2 and max_y - min_y <= height - padding * 2:
            return zoom
    return MIN_ZOOM


def compute_tile_grid(coordinates: Sequence[Coordinate], width: int, height: int,
                      padding: int = MAP_PADDING) -> TileGrid:
    """Center the route in a width x height window and list the tiles that cover it"""
    zoom = find_zoom_level(coordinates, width, height, padding)
    min_x, max_x, min_y, max_y = _projected_extent(coordinates, zoom)

    top_left_x = (min_x + max_x) / 2 - width / 2
    top_left_y = (min_y + max_y) / 2 - height / 2

    return TileGrid(
        zoom=zoom,
        top_left_x=top_left_x,
        top_left_y=top_left_y,
        start_tile_x=math.floor(top_left_x / TILE_SIZE),
        end_tile_x=math.floor((top_left_x + width) / TILE_SIZE),
        start_tile_y=math.floor(top_left_y / TILE_SIZE),
        end_tile_y=math.floor((top_left_y + height) / TILE_SIZE),
    )


def build_mapbox_url(route_segments: Sequence[Sequence[Coordinate]], width: int, height: int,
                     access_token: str) -> str:
    """Mapbox Static Images URL with the route embedded as a GeoJSON overlay"""
    sampled = [
        segment for segment in downsample_segments(route_segments, MAPBOX_MAX_POINTS)
        if len(segment) >= 2
    ]
    if not sampled:
        raise ValueError("No route segments remain after downsampling")

    lines = [[[point[1], point[0]] for point in segment] for segment in sampled]
    if len(lines) > 1:
        geometry = {"type": "MultiLineString", "coordinates": lines}
    else:
        geometry = {"type": "LineString", "coordinates": lines[0]}

    feature = {
        "type": "Feature",
        "properties": {
            "stroke": ROUTE_COLOR,
            "stroke-width": ROUTE_WIDTH,
            "stroke-opacity": 0.9,
        },
        "geometry": geometry,
    }

    encoded = quote(json.dumps(feature, separators=(",", ":")), safe="-_.!~*'()")
    return (
        f"{MAPBOX_STATIC_URL}/geojson({encoded})/auto/{width}x{height}"
        f"?padding={MAPBOX_PADDING}&access_token={quote(access_token, safe='')}"
    )


class MapRenderer:
    """Renders PNG route previews; one instance is shared per process"""

    def __init__(self,
                 mapbox_access_token: Optional[str] = None,
                 tile_url: str = DEFAULT_TILE_URL,
                 user_agent: str = DEFAULT_TILE_USER_AGENT,
                 timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.mapbox_access_token = (mapbox_access_token or "").strip()
        self.tile_url = tile_url
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": self.user_agent},
        )

    async def render(self,
                     coordinates: Sequence[Coordinate],
                     route_segments: Optional[Sequence[Sequence[Coordinate]]] = None,
                     width: int = DEFAULT_MAP_WIDTH,
                     height: int = DEFAULT_MAP_HEIGHT) -> Optional[bytes]:
        """
        Render a route preview.

        Args:
            coordinates: Route coordinates, already bounded for rendering
            route_segments: Optional disjoint pieces of the route
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            PNG bytes, or None when fewer than two usable points exist

        Raises:
            MapRenderError: If a map tile cannot be fetched or decoded
        """
        segments = normalize_route_segments(coordinates, route_segments)
        if not segments:
            return None

        route = [point for segment in segments for point in segment]
        if len(route) < 2 or not _bounds_are_finite(route):
            return None

        async with self._client() as client:
            if self.mapbox_access_token:
                try:
                    return await self._render_mapbox(client, segments, width, height)
                except Exception as e:
                    logger.warning(f"Mapbox map rendering failed; using OSM fallback: {e}")

            return await self._render_tiles(client, route, segments, width, height)

    def render_sync(self, coordinates: Sequence[Coordinate],
                    route_segments: Optional[Sequence[Sequence[Coordinate]]] = None,
                    width: int = DEFAULT_MAP_WIDTH,
                    height: int = DEFAULT_MAP_HEIGHT) -> Optional[bytes]:
        """Blocking wrapper for worker code that has no running event loop"""
        return asyncio.run(self.render(coordinates, route_segments, width, height))

    async def _render_mapbox(self, client: httpx.AsyncClient, segments: List[List[Coordinate]],
                             width: int, height: int) -> bytes:
        url = build_mapbox_url(segments, width, height, self.mapbox_access_token)
        response = await client.get(url)
        if not response.is_success:
            raise MapRenderError(f"Mapbox request failed with status {response.status_code}")
        return response.content

    async def _fetch_tile(self, client: httpx.AsyncClient, zoom: int, tile_x: int, tile_y: int) -> Image.Image:
        world_size = 2 ** zoom

        if tile_y < 0 or tile_y >= world_size:
            return Image.new("RGBA", (TILE_SIZE, TILE_SIZE), FILLER_TILE_COLOR)

        wrapped_x = tile_x % world_size
        url = self.tile_url.format(z=zoom, x=wrapped_x, y=tile_y)
        response = await client.get(url)
        if not response.is_success:
            raise MapRenderError(
                f"Failed to fetch OSM tile {zoom}/{wrapped_x}/{tile_y}: {response.status_code}"
            )

        try:
            with Image.open(io.BytesIO(response.content)) as tile:
                return tile.convert("RGBA")
        except (OSError, Image.DecompressionBombError) as e:
            raise MapRenderError(f"OSM tile {zoom}/{wrapped_x}/{tile_y} is not an image: {e}") from e

    async def _render_tiles(self, client: httpx.AsyncClient, route: List[Coordinate],
                            segments: List[List[Coordinate]], width: int, height: int) -> bytes:
        grid = compute_tile_grid(route, width, height)
        positions = grid.tiles()

        logger.debug(f"Rendering {len(positions)} tiles at zoom {grid.zoom}")
        tiles = await asyncio.gather(
            *(self._fetch_tile(client, grid.zoom, tile_x, tile_y) for tile_x, tile_y in positions)
        )

        canvas = Image.new("RGBA", (width, height), CANVAS_COLOR)
        for (tile_x, tile_y), tile in zip(positions, tiles):
            canvas.paste(tile, grid.offset(tile_x, tile_y))

        self._draw_overlay(canvas, grid, segments)

        output = io.BytesIO()
        canvas.save(output, format="PNG")
        return output.getvalue()

    @staticmethod
    def _draw_overlay(canvas: Image.Image, grid: TileGrid, segments: List[List[Coordinate]]) -> None:
        draw = ImageDraw.Draw(canvas)
        pixel_segments = [[grid.to_pixel(point) for point in segment] for segment in segments]

        for segment in pixel_segments:
            draw.line(segment, fill=ROUTE_COLOR, width=ROUTE_WIDTH, joint="curve")

        for (x, y), color in ((pixel_segments[0][0], START_MARKER_COLOR),
                              (pixel_segments[-1][-1], END_MARKER_COLOR)):
            draw.ellipse(
                (x - MARKER_RADIUS, y - MARKER_RADIUS, x + MARKER_RADIUS, y + MARKER_RADIUS),
                fill=color,
                outline="#ffffff",
                width=MARKER_OUTLINE_WIDTH,
            )
