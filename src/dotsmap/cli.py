"""CLI entrypoint for the dotsmap engine."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from .config import GRANULARITIES, AppConfig, load_config
from .engine import load_engine
from .models import (
    CountrySelection,
    Granularity,
    NoSelection,
    OrganizationSelection,
    ProjectRecord,
    Selection,
    Surface,
)
from .render import format_render_lines, run_layout, run_render_map
from .util import ensure_directories, setup_logging
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("dotsmap.cli")

QUERY_LISTS = ("countries", "organizations", "projects", "project-types")
QUERY_LOOKUPS = ("country", "organization", "region", "project")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dotsmap",
        description="Dots map query and aggregation engine.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    validate_p = subparsers.add_parser("validate", help="Validate config, dataset and map files.")
    add_common(validate_p)

    query_p = subparsers.add_parser("query", help="Print dataset query results.")
    add_common(query_p)
    query_p.add_argument("kind", choices=QUERY_LISTS + QUERY_LOOKUPS, help="Query to run.")
    query_p.add_argument("value", nargs="?", default=None, help="Lookup key for single-entity queries.")

    layout_p = subparsers.add_parser("layout", help="Write the circle layout as JSON.")
    add_common(layout_p)
    layout_p.add_argument("--granularity", choices=GRANULARITIES, default=None)
    layout_p.add_argument("--width", type=float, default=None, help="Surface width in pixels.")
    layout_p.add_argument("--height", type=float, default=None, help="Surface height in pixels.")
    layout_p.add_argument("--selected", default=None, help="Key of the selected circle.")
    layout_p.add_argument("--hovered", default=None, help="Key of the hovered circle.")

    render_p = subparsers.add_parser("render", help="Render a PNG preview of the map.")
    add_common(render_p)
    render_p.add_argument(
        "--selected-country",
        action="append",
        default=[],
        help="Highlight a country. Can be repeated.",
    )
    render_p.add_argument("--selected-project", default=None, help="Highlight a project's countries.")
    render_p.add_argument(
        "--selected-organization",
        default=None,
        help="Highlight the countries of an organization.",
    )
    render_p.add_argument("--selected", default=None, help="Key of the selected circle.")
    render_p.add_argument("--hovered", default=None, help="Key of the hovered circle.")

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    ensure_directories(cfg.paths.build_directories)
    setup_logging(cfg.paths.logs_dir / "dotsmap.log", verbose=args.verbose)
    return cfg


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _format_project(project: ProjectRecord) -> str:
    suffix = f" [{project.project_type}]" if project.project_type else ""
    return f"{project.project_name} | {project.organization} | {project.location}{suffix}"


def _run_query(cfg: AppConfig, *, kind: str, value: str | None) -> int:
    if kind in QUERY_LOOKUPS and not value:
        LOGGER.error("Query '%s' requires a value.", kind)
        return 2
    engine = load_engine(cfg)
    queries = engine.queries
    lines: list[str]
    if kind == "countries":
        lines = [f"{country} ({queries.country_name(country)})" for country in queries.list_countries()]
    elif kind == "organizations":
        lines = queries.list_organizations()
    elif kind == "projects":
        lines = [_format_project(project) for project in queries.list_projects()]
    elif kind == "project-types":
        lines = queries.list_project_types()
    elif kind == "country":
        lines = [_format_project(project) for project in queries.projects_by_country(str(value))]
    elif kind == "organization":
        lines = [_format_project(project) for project in queries.projects_by_organization(str(value))]
        countries = queries.organization_countries(str(value))
        lines.append("countries: " + ", ".join(sorted(set(countries))))
    elif kind == "region":
        lines = [_format_project(project) for project in queries.projects_by_region(str(value))]
    elif kind == "project":
        project = queries.find_project_by_name(str(value))
        if project is None:
            LOGGER.error("Project not found: %s", value)
            return 1
        lines = [
            _format_project(project),
            "countries: " + ", ".join(queries.project_countries_of(project)),
        ]
    else:
        raise ValueError(f"Unknown query: {kind}")
    for line in lines:
        print(line)
    LOGGER.info("Query '%s' returned %d lines.", kind, len(lines))
    return 0


def _run_layout(
    cfg: AppConfig,
    *,
    granularity: str | None,
    width: float | None,
    height: float | None,
    selected: str | None,
    hovered: str | None,
) -> int:
    surface = Surface(
        width=width if width is not None else float(cfg.render.width_px),
        height=height if height is not None else float(cfg.render.height_px),
    )
    report = run_layout(
        cfg,
        surface=surface,
        granularity=granularity,
        selected_key=selected,
        hovered_key=hovered,
    )
    for line in format_render_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _selection_from_args(args: argparse.Namespace) -> Selection:
    countries = [str(item) for item in args.selected_country]
    if countries:
        return CountrySelection(countries=tuple(countries))
    if args.selected_organization:
        return OrganizationSelection(organization=str(args.selected_organization))
    return NoSelection()


def _run_render(cfg: AppConfig, args: argparse.Namespace) -> int:
    report = run_render_map(
        cfg,
        selection=_selection_from_args(args),
        selected_project=args.selected_project,
        selected_key=args.selected,
        hovered_key=args.hovered,
    )
    for line in format_render_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "validate":
        return _run_validate(cfg)
    if command == "query":
        try:
            return _run_query(cfg, kind=str(args.kind), value=args.value)
        except (FileNotFoundError, ValueError) as exc:
            LOGGER.error("Query failed: %s", exc)
            return 1
    if command == "layout":
        granularity = Granularity.parse(args.granularity).value if args.granularity else None
        return _run_layout(
            cfg,
            granularity=granularity,
            width=args.width,
            height=args.height,
            selected=args.selected,
            hovered=args.hovered,
        )
    if command == "render":
        return _run_render(cfg, args)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
