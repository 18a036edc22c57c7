"""Screen-space placement, sizing and coloring of aggregate circles."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Sequence

from .config import CirclesConfig, DotsConfig
from .map_data import MapData
from .models import AggregateEntry, CountryGeometry, Dot, ScreenCircle, Surface
from .ordering import order_for_render
from .queries import ProjectQueries, country_name
from .util import normalize_token

_LOGGER = logging.getLogger("dotsmap.projection")


@dataclass(frozen=True, slots=True)
class PreparedCountry:
    """Country geometry with its resolved dot color and dot radii."""

    id: str
    region: str
    color: str
    dots: tuple[Dot, ...]


class GeometricProjector:
    """Maps aggregate entries onto a measured rendering surface."""

    def __init__(self, map_data: MapData, cfg: CirclesConfig | None = None) -> None:
        self.map_data = map_data
        self.cfg = cfg if cfg is not None else CirclesConfig()

    @property
    def offscreen(self) -> tuple[float, float]:
        return self.cfg.offscreen

    def relative_position(self, key: str) -> tuple[float, float] | None:
        """Anchor or dot-cloud centroid in surface-relative units."""
        region = self.map_data.get_region(key)
        if region is not None and region.anchor is not None and not self.map_data.has_country(key):
            return region.anchor
        dots = self.map_data.dots_for(key)
        if not dots:
            return None
        return centroid(dots)

    def project(self, key: str, surface: Surface | None) -> tuple[float, float]:
        if surface is None:
            return self.offscreen
        position = self.relative_position(key)
        if position is None:
            _LOGGER.debug("No geometry for %r; using off-screen position", key)
            return self.offscreen
        rel_x, rel_y = position
        return (rel_x * surface.width, rel_y * surface.height)

    def radius(self, relative_magnitude: float) -> int:
        span = self.cfg.max_radius - self.cfg.min_radius
        return math.floor(span * relative_magnitude + self.cfg.min_radius)

    def fill_color(self, relative_magnitude: float, is_selected: bool = False, is_hovered: bool = False) -> str:
        if is_hovered:
            return self.cfg.hover_color
        if is_selected:
            return self.cfg.selected_color
        return palette_color(self.cfg.palette, relative_magnitude)

    def text_color(self, is_selected: bool = False, is_hovered: bool = False) -> str:
        if is_selected or is_hovered:
            return self.cfg.highlight_text_color
        return self.cfg.text_color

    def screen_circle(
        self,
        entry: AggregateEntry,
        surface: Surface | None,
        *,
        selected_key: str | None = None,
        hovered_key: str | None = None,
    ) -> ScreenCircle:
        is_selected = selected_key is not None and entry.key == selected_key
        is_hovered = hovered_key is not None and entry.key == hovered_key
        x, y = self.project(entry.key, surface)
        return ScreenCircle(
            key=entry.key,
            x=x,
            y=y,
            radius=self.radius(entry.relative_magnitude),
            fill_color=self.fill_color(entry.relative_magnitude, is_selected, is_hovered),
            text_color=self.text_color(is_selected, is_hovered),
            display_label=str(entry.project_count),
            title=country_name(entry.key),
        )

    def screen_circles(
        self,
        entries: Sequence[AggregateEntry],
        surface: Surface | None,
        *,
        selected_key: str | None = None,
        hovered_key: str | None = None,
    ) -> list[ScreenCircle]:
        """Circles for every entry, in paint order."""
        ordered = order_for_render(entries, selected_key, hovered_key)
        return [
            self.screen_circle(entry, surface, selected_key=selected_key, hovered_key=hovered_key)
            for entry in ordered
        ]


def palette_color(palette: Sequence[str], relative_magnitude: float) -> str:
    index = math.ceil(relative_magnitude * len(palette)) - 1
    index = min(max(index, 0), len(palette) - 1)
    return palette[index]


def centroid(dots: Sequence[Dot]) -> tuple[float, float]:
    """Unweighted mean of every dot; countries with more dots pull harder."""
    multipoint = _require_shapely_multipoint()
    point = multipoint([(dot.x, dot.y) for dot in dots]).centroid
    return (float(point.x), float(point.y))


def prepare_map(
    countries: Iterable[CountryGeometry],
    queries: ProjectQueries,
    cfg: DotsConfig | None = None,
) -> list[PreparedCountry]:
    """Resolve per-country dot color and dot radius.

    Explicit geometry colors win. Countries with projects draw from the random
    color set, others get the plain dot color. Picks are seeded so the same
    inputs always give the same map.
    """
    cfg = cfg if cfg is not None else DotsConfig()
    rng = random.Random(cfg.random_seed)
    prepared: list[PreparedCountry] = []
    for country in countries:
        if country.color is not None:
            color = country.color
        elif queries.is_country_represented(country.id):
            color = rng.choice(cfg.random_color_set)
        else:
            color = cfg.color
        dots = tuple(
            Dot(x=dot.x, y=dot.y, radius=dot.radius if dot.radius is not None else cfg.radius)
            for dot in country.dots
        )
        prepared.append(PreparedCountry(id=country.id, region=country.region, color=color, dots=dots))
    return prepared


def dot_color(country: PreparedCountry, highlighted: Iterable[str], cfg: DotsConfig | None = None) -> str:
    """Dot color after applying the current selection highlight."""
    cfg = cfg if cfg is not None else DotsConfig()
    if country.id in {normalize_token(item) for item in highlighted}:
        return cfg.selected_color
    return country.color


@lru_cache(maxsize=1)
def _require_shapely_multipoint() -> Any:
    try:
        from shapely.geometry import MultiPoint
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for centroid computation") from exc
    return MultiPoint
