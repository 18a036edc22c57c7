"""Validation layer for config, dataset and map inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .config import AppConfig
from .dataset import DatasetStore, load_dataset
from .map_data import MapData, load_map_data
from .queries import ProjectQueries
from .util import normalize_country_key


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that the dataset and map data load and agree with each other."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        for path in self.cfg.paths.required_input_files:
            if not path.exists():
                report.add_error(f"Missing required input file: {path}")
        store = self._load_dataset(report)
        map_data = self._load_map(report)
        if store is not None and map_data is not None:
            check_consistency(report, store=store, map_data=map_data)
        return report

    def _load_dataset(self, report: ValidationReport) -> DatasetStore | None:
        path = self.cfg.paths.dataset
        if not path.exists():
            return None
        try:
            store = load_dataset(path)
        except Exception as exc:
            report.add_error(f"Failed parsing dataset file '{path}': {exc}")
            return None
        if not len(store):
            report.add_warning(f"Dataset file is empty: {path}")
        report.add_info(f"Loaded {len(store)} project records from {path}")
        return store

    def _load_map(self, report: ValidationReport) -> MapData | None:
        path = self.cfg.paths.map
        if not path.exists():
            return None
        try:
            map_data = load_map_data(path)
        except Exception as exc:
            report.add_error(f"Failed parsing map file '{path}': {exc}")
            return None
        report.add_info(
            f"Loaded {len(map_data.countries)} country geometries and "
            f"{len(map_data.regions)} regions from {path}"
        )
        return map_data


def check_consistency(report: ValidationReport, *, store: DatasetStore, map_data: MapData) -> None:
    """Cross-check dataset tokens against the map geometry."""
    known_countries = {normalize_country_key(country.id) for country in map_data.countries}
    for region in map_data.regions:
        unknown = sorted(
            {member for member in region.countries if normalize_country_key(member) not in known_countries}
        )
        if unknown:
            report.add_error(
                f"Region '{region.id}' references unknown countries: {_format_code_list(unknown)}"
            )

    for country in map_data.countries:
        if not country.dots:
            report.add_warning(f"Country '{country.id}' has no dots and will never be placed.")

    queries = ProjectQueries(store, map_data)
    known_tokens = known_countries | {region.id for region in map_data.regions}
    unplaced = [
        token
        for token in queries.list_countries()
        if token not in known_tokens and normalize_country_key(token) not in known_tokens
    ]
    if unplaced:
        report.add_warning(
            "Dataset locations without map geometry or region: " + _format_code_list(unplaced)
        )
    report.add_info(
        f"Dataset references {len(queries.list_countries())} locations and "
        f"{len(queries.list_organizations())} organizations."
    )


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Validation completed with no errors.")
    return lines


def _format_code_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
