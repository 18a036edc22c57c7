"""Typed configuration loader for `config.yaml`.

Every key is optional. Missing keys fall back to the defaults declared on the
dataclasses below, which mirror the values the map widget ships with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .models import Granularity

GRANULARITIES = tuple(item.value for item in Granularity)

DEFAULT_PALETTE = ("#F6AAAA", "#9EFAFB", "#BF93FF", "#F3D882")


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    dataset: Path
    map: Path
    output_dir: Path
    logs_dir: Path

    @property
    def required_input_files(self) -> tuple[Path, ...]:
        return (self.dataset, self.map)

    @property
    def build_directories(self) -> tuple[Path, ...]:
        return (self.output_dir, self.logs_dir)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            dataset=_path_from_cfg(raw.get("dataset", "data/dataset.yaml"), "paths.dataset", root_dir),
            map=_path_from_cfg(raw.get("map", "data/map.yaml"), "paths.map", root_dir),
            output_dir=_path_from_cfg(raw.get("output_dir", "build"), "paths.output_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class DotsConfig:
    """Per-country dot styling.

    color: dot color of countries without projects (default `#C8C8CA`).
    radius: dot radius used when a dot carries no override (default `2.5`).
    selected_color: dot color of highlighted countries (default `#DB4437`).
    random_color_set: candidate colors for countries with projects
        (default `#9963f7` only).
    random_seed: seed for picking from `random_color_set` so renders repeat.
    """

    color: str = "#C8C8CA"
    radius: float = 2.5
    selected_color: str = "#DB4437"
    random_color_set: tuple[str, ...] = ("#9963f7",)
    random_seed: int = 0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> DotsConfig:
        defaults = cls()
        radius = _float(raw.get("radius", defaults.radius), "dots.radius")
        if radius <= 0:
            raise ValueError("dots.radius must be > 0")
        color_set = _str_list(
            raw.get("random_color_set", list(defaults.random_color_set)), "dots.random_color_set"
        )
        if not color_set:
            raise ValueError("dots.random_color_set must not be empty")
        return cls(
            color=_str(raw.get("color", defaults.color), "dots.color"),
            radius=radius,
            selected_color=_str(raw.get("selected_color", defaults.selected_color), "dots.selected_color"),
            random_color_set=color_set,
            random_seed=_int(raw.get("random_seed", defaults.random_seed), "dots.random_seed"),
        )


@dataclass(frozen=True, slots=True)
class CirclesConfig:
    min_radius: float = 18.0
    max_radius: float = 40.0
    palette: tuple[str, ...] = DEFAULT_PALETTE
    hover_color: str = "#DB4437"
    selected_color: str = "#DB4437"
    text_color: str = "#000000"
    highlight_text_color: str = "#FFFFFF"
    offscreen: tuple[float, float] = (-100.0, -100.0)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> CirclesConfig:
        defaults = cls()
        min_radius = _float(raw.get("min_radius", defaults.min_radius), "circles.min_radius")
        max_radius = _float(raw.get("max_radius", defaults.max_radius), "circles.max_radius")
        if min_radius < 0:
            raise ValueError("circles.min_radius must be >= 0")
        if max_radius < min_radius:
            raise ValueError("circles.max_radius cannot be smaller than circles.min_radius")
        palette = _str_list(raw.get("palette", list(defaults.palette)), "circles.palette")
        if not palette:
            raise ValueError("circles.palette must not be empty")

        offscreen_raw = raw.get("offscreen", list(defaults.offscreen))
        if not isinstance(offscreen_raw, list) or len(offscreen_raw) != 2:
            raise ValueError("Expected [x, y] list for 'circles.offscreen'")
        offscreen = (
            _float(offscreen_raw[0], "circles.offscreen[0]"),
            _float(offscreen_raw[1], "circles.offscreen[1]"),
        )
        return cls(
            min_radius=min_radius,
            max_radius=max_radius,
            palette=palette,
            hover_color=_str(raw.get("hover_color", defaults.hover_color), "circles.hover_color"),
            selected_color=_str(
                raw.get("selected_color", defaults.selected_color), "circles.selected_color"
            ),
            text_color=_str(raw.get("text_color", defaults.text_color), "circles.text_color"),
            highlight_text_color=_str(
                raw.get("highlight_text_color", defaults.highlight_text_color),
                "circles.highlight_text_color",
            ),
            offscreen=offscreen,
        )


@dataclass(frozen=True, slots=True)
class AggregateConfig:
    granularity: str = "mixed"
    collapse_regions: tuple[str, ...] = ("europe", "global")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> AggregateConfig:
        defaults = cls()
        granularity = _str(raw.get("granularity", defaults.granularity), "aggregate.granularity").casefold()
        if granularity not in GRANULARITIES:
            raise ValueError("aggregate.granularity must be one of: " + ", ".join(GRANULARITIES))
        collapse = _str_list(
            raw.get("collapse_regions", list(defaults.collapse_regions)), "aggregate.collapse_regions"
        )
        return cls(
            granularity=granularity,
            collapse_regions=tuple(item.casefold() for item in collapse),
        )


@dataclass(frozen=True, slots=True)
class RenderConfig:
    width_px: int = 1000
    height_px: int = 500
    dpi: int = 100
    background: str = "white"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> RenderConfig:
        defaults = cls()
        width_px = _int(raw.get("width_px", defaults.width_px), "render.width_px")
        height_px = _int(raw.get("height_px", defaults.height_px), "render.height_px")
        dpi = _int(raw.get("dpi", defaults.dpi), "render.dpi")
        if width_px <= 0 or height_px <= 0:
            raise ValueError("render.width_px and render.height_px must be > 0")
        if dpi <= 0:
            raise ValueError("render.dpi must be > 0")
        return cls(
            width_px=width_px,
            height_px=height_px,
            dpi=dpi,
            background=_str(raw.get("background", defaults.background), "render.background"),
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    paths: PathsConfig
    dots: DotsConfig = field(default_factory=DotsConfig)
    circles: CirclesConfig = field(default_factory=CirclesConfig)
    aggregate: AggregateConfig = field(default_factory=AggregateConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path | None) -> AppConfig:
        root_dir = source_path.parent.resolve() if source_path is not None else Path.cwd()
        return cls(
            source_path=source_path.resolve() if source_path is not None else None,
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            dots=DotsConfig.from_mapping(_mapping(raw.get("dots"), "dots")),
            circles=CirclesConfig.from_mapping(_mapping(raw.get("circles"), "circles")),
            aggregate=AggregateConfig.from_mapping(_mapping(raw.get("aggregate"), "aggregate")),
            render=RenderConfig.from_mapping(_mapping(raw.get("render"), "render")),
        )

    @classmethod
    def default(cls) -> AppConfig:
        return cls.from_mapping({}, None)


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
