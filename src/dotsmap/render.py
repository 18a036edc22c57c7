"""Static PNG preview and JSON layout export of the dots map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from .config import AppConfig, DotsConfig, RenderConfig
from .engine import MapEngine, load_engine
from .models import NoSelection, ProjectSelection, ScreenCircle, Selection, Surface
from .projection import PreparedCountry, dot_color
from .util import write_json

_LOGGER = logging.getLogger("dotsmap.render")

_POINTS_PER_INCH = 72.0
_LABEL_FONT_PX = 10.0


@dataclass(slots=True)
class RenderReport:
    output_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class MapRenderer:
    """Deterministic renderer for the dots map with project count circles."""

    def __init__(self, cfg: RenderConfig, dots_cfg: DotsConfig | None = None) -> None:
        self.cfg = cfg
        self.dots_cfg = dots_cfg if dots_cfg is not None else DotsConfig()

    @property
    def surface(self) -> Surface:
        return Surface(width=float(self.cfg.width_px), height=float(self.cfg.height_px))

    def render(
        self,
        *,
        countries: Sequence[PreparedCountry],
        circles: Sequence[ScreenCircle],
        highlighted: Sequence[str],
        output_path: Path,
    ) -> Path:
        plt, patches = _require_matplotlib()
        width_px = self.cfg.width_px
        height_px = self.cfg.height_px
        dpi = self.cfg.dpi

        fig, ax = plt.subplots(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
        fig.subplots_adjust(left=0.0, right=1.0, bottom=0.0, top=1.0)
        try:
            fig.patch.set_facecolor(self.cfg.background)
            ax.set_facecolor(self.cfg.background)
            ax.set_xlim(0, width_px)
            # screen coordinates grow downwards
            ax.set_ylim(height_px, 0)
            ax.set_axis_off()

            self._draw_dots(ax=ax, countries=countries, highlighted=highlighted)
            # circles arrive in paint order, so z-order follows list position
            for zorder, circle in enumerate(circles, start=10):
                ax.add_patch(
                    patches.Circle(
                        (circle.x, circle.y),
                        circle.radius,
                        facecolor=circle.fill_color,
                        edgecolor="none",
                        zorder=zorder,
                    )
                )
                ax.text(
                    circle.x,
                    circle.y,
                    circle.display_label,
                    color=circle.text_color,
                    ha="center",
                    va="center",
                    fontsize=_px_to_points(_LABEL_FONT_PX, dpi),
                    zorder=zorder,
                )

            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_path, dpi=dpi, format="png")
            return output_path
        finally:
            plt.close(fig)

    def _draw_dots(
        self,
        *,
        ax: Any,
        countries: Sequence[PreparedCountry],
        highlighted: Sequence[str],
    ) -> None:
        xs: list[float] = []
        ys: list[float] = []
        sizes: list[float] = []
        colors: list[str] = []
        for country in countries:
            color = dot_color(country, highlighted, self.dots_cfg)
            for dot in country.dots:
                radius = dot.radius if dot.radius is not None else self.dots_cfg.radius
                xs.append(dot.x * self.cfg.width_px)
                ys.append(dot.y * self.cfg.height_px)
                sizes.append((2.0 * _px_to_points(radius, self.cfg.dpi)) ** 2)
                colors.append(color)
        if xs:
            ax.scatter(xs, ys, s=sizes, c=colors, marker="o", linewidths=0.0, zorder=1)


def build_layout(
    engine: MapEngine,
    *,
    surface: Surface | None,
    granularity: str | None = None,
    selected_key: str | None = None,
    hovered_key: str | None = None,
) -> dict[str, Any]:
    circles = engine.layout(
        surface,
        granularity=granularity,
        selected_key=selected_key,
        hovered_key=hovered_key,
    )
    return {
        "surface": (
            {"width": surface.width, "height": surface.height} if surface is not None else None
        ),
        "granularity": granularity or engine.cfg.aggregate.granularity,
        "selected": selected_key,
        "hovered": hovered_key,
        "circles": [circle.to_dict() for circle in circles],
    }


def run_layout(
    cfg: AppConfig,
    *,
    surface: Surface,
    granularity: str | None = None,
    selected_key: str | None = None,
    hovered_key: str | None = None,
) -> RenderReport:
    """Compute the circle layout and write it as JSON."""
    output_path = cfg.paths.output_dir / "layout.json"
    report = RenderReport(output_path=output_path)
    engine = _load_engine_into(report, cfg)
    if engine is None:
        return report
    try:
        payload = build_layout(
            engine,
            surface=surface,
            granularity=granularity,
            selected_key=selected_key,
            hovered_key=hovered_key,
        )
    except ValueError as exc:
        report.add_error(f"Layout failed: {exc}")
        return report
    write_json(output_path, payload)
    report.summary = {"circles": len(payload["circles"])}
    report.add_info(f"Layout with {len(payload['circles'])} circles written to {output_path}")
    return report


def run_render_map(
    cfg: AppConfig,
    *,
    selection: Selection | None = None,
    selected_project: str | None = None,
    selected_key: str | None = None,
    hovered_key: str | None = None,
) -> RenderReport:
    """Render the PNG preview for the configured dataset and map.

    `selected_project` is looked up by exact name and used only when no other
    selection is given.
    """
    output_path = cfg.paths.output_dir / "map.png"
    report = RenderReport(output_path=output_path)
    engine = _load_engine_into(report, cfg)
    if engine is None:
        return report

    if selected_project and (selection is None or isinstance(selection, NoSelection)):
        project = engine.queries.find_project_by_name(selected_project)
        if project is None:
            report.add_warning(f"Selected project not found: {selected_project}")
        else:
            selection = ProjectSelection(project=project)

    renderer = MapRenderer(cfg.render, cfg.dots)
    highlighted = engine.highlighted_countries(selection)
    unknown = sorted({item for item in highlighted if not engine.map_data.has_country(item)})
    if unknown:
        report.add_warning("Selected countries without map geometry: " + ", ".join(unknown))

    circles = engine.layout(renderer.surface, selected_key=selected_key, hovered_key=hovered_key)
    offscreen = [circle.key for circle in circles if (circle.x, circle.y) == cfg.circles.offscreen]
    if offscreen:
        report.add_warning("Circles without geometry placed off-screen: " + ", ".join(offscreen))

    try:
        renderer.render(
            countries=engine.prepared_countries(),
            circles=circles,
            highlighted=highlighted,
            output_path=output_path,
        )
    except Exception as exc:
        _LOGGER.exception("Map rendering failed")
        report.add_error(f"Map rendering failed: {exc}")
        return report

    report.summary = {
        "countries": len(engine.map_data.countries),
        "circles": len(circles),
        "highlighted": len(highlighted),
    }
    report.add_info(
        "Render summary: "
        f"countries={len(engine.map_data.countries)}, "
        f"circles={len(circles)}, "
        f"highlighted={len(highlighted)}"
    )
    report.add_info(f"Map written to {output_path}")
    return report


def format_render_lines(report: RenderReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Completed with no errors.")
    return lines


def _load_engine_into(report: RenderReport, cfg: AppConfig) -> MapEngine | None:
    try:
        engine = load_engine(cfg)
    except (FileNotFoundError, ValueError) as exc:
        report.add_error(f"Failed loading inputs: {exc}")
        return None
    report.add_info(
        f"Loaded {len(engine.store)} projects and {len(engine.map_data.countries)} country geometries"
    )
    return engine


def _px_to_points(value_px: float, dpi: int) -> float:
    return value_px * _POINTS_PER_INCH / dpi


def _require_matplotlib() -> tuple[Any, Any]:
    try:
        import matplotlib

        matplotlib.use("Agg", force=False)
        import matplotlib.patches as patches
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for map rendering") from exc
    return (plt, patches)
