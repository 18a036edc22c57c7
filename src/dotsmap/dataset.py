"""Project dataset loading and the immutable dataset store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from .models import ProjectRecord

_LOGGER = logging.getLogger("dotsmap.dataset")


class DatasetStore:
    """Immutable ordered sequence of project records."""

    def __init__(self, records: Iterable[ProjectRecord]) -> None:
        self._records: tuple[ProjectRecord, ...] = tuple(records)

    @property
    def records(self) -> tuple[ProjectRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)


def read_structured_file(path: Path) -> Any:
    """Parse a JSON or YAML document depending on the file suffix."""
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.casefold() == ".json":
            return json.load(fh)
        return yaml.safe_load(fh)


def parse_projects(raw: Any, source: str = "<dataset>") -> list[ProjectRecord]:
    """Validate raw rows and reject duplicate project names."""
    if not isinstance(raw, list):
        raise ValueError(f"Expected list in {source}")

    projects: list[ProjectRecord] = []
    seen_names: set[str] = set()
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValueError(f"Expected mapping at index {idx} in {source}")
        try:
            project = ProjectRecord.from_mapping(item)
        except ValueError as exc:
            raise ValueError(f"Invalid project at index {idx} in {source}: {exc}") from exc
        if project.project_name in seen_names:
            raise ValueError(f"Duplicate projectName '{project.project_name}' in {source}")
        seen_names.add(project.project_name)
        projects.append(project)
    return projects


def load_dataset(path: Path) -> DatasetStore:
    """Load and validate the project dataset file."""
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    projects = parse_projects(read_structured_file(path), str(path))
    _LOGGER.info("Loaded %d project records from %s", len(projects), path)
    return DatasetStore(projects)
