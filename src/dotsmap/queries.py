"""Normalized, memoized queries over the project dataset."""

from __future__ import annotations

from typing import Sequence

from .dataset import DatasetStore
from .map_data import MapData
from .memo import QueryCache
from .models import (
    CountrySelection,
    NoSelection,
    OrganizationSelection,
    ProjectRecord,
    ProjectSelection,
    Selection,
)
from .util import locale_sort_key, normalize_country_key, normalize_token, split_tokens

COUNTRY_NAME_OVERRIDES: dict[str, str] = {
    "us": "united states",
}


def _project_sort_key(project: ProjectRecord) -> tuple[str, str]:
    return locale_sort_key(project.project_name)


def _unique_sorted_tokens(fields: Sequence[str]) -> list[str]:
    tokens = {token for raw in fields for token in split_tokens(raw) if token}
    return sorted(tokens, key=locale_sort_key)


def country_name(country_id: str) -> str:
    """Display name for a country; identity is never affected."""
    return COUNTRY_NAME_OVERRIDES.get(normalize_token(country_id), country_id)


class ProjectQueries:
    """Query layer over an immutable dataset store.

    `projects_by_country` and `projects_by_region` are memoized per normalized
    key and return tuples shared between callers; the other queries are
    recomputed on every call and return fresh lists.
    """

    def __init__(
        self,
        store: DatasetStore,
        map_data: MapData | None = None,
        *,
        country_cache: QueryCache[tuple[ProjectRecord, ...]] | None = None,
        region_cache: QueryCache[tuple[ProjectRecord, ...]] | None = None,
    ) -> None:
        self.store = store
        self.map_data = map_data if map_data is not None else MapData(())
        self.country_cache = country_cache if country_cache is not None else QueryCache("projects_by_country")
        self.region_cache = region_cache if region_cache is not None else QueryCache("projects_by_region")

    def list_countries(self) -> list[str]:
        return _unique_sorted_tokens([project.location for project in self.store.records])

    def list_organizations(self) -> list[str]:
        return _unique_sorted_tokens([project.organization for project in self.store.records])

    def list_projects(self) -> list[ProjectRecord]:
        return sorted(self.store.records, key=_project_sort_key)

    def list_project_types(self) -> list[str]:
        """Distinct non-empty project types in dataset order."""
        types = (project.project_type.strip() for project in self.store.records)
        return [value for value in dict.fromkeys(types) if value]

    @staticmethod
    def project_countries_of(project: ProjectRecord) -> list[str]:
        return sorted(split_tokens(project.location), key=locale_sort_key)

    def projects_by_country(self, country_id: str) -> tuple[ProjectRecord, ...]:
        return self.country_cache.get_or_compute(
            normalize_country_key(country_id), self._compute_projects_by_country
        )

    def _compute_projects_by_country(self, key: str) -> tuple[ProjectRecord, ...]:
        return tuple(
            project
            for project in self.list_projects()
            if key in self.project_countries_of(project)
        )

    def projects_by_organization(self, organization: str) -> list[ProjectRecord]:
        """Projects whose organization text contains the query, ignoring case."""
        needle = organization.casefold()
        return [
            project
            for project in self.list_projects()
            if needle in project.organization.casefold()
        ]

    def organization_countries(self, organization: str) -> list[str]:
        """Countries of every matching project; repeats are kept."""
        return [
            token
            for project in self.projects_by_organization(organization)
            for token in split_tokens(project.location)
            if token
        ]

    def is_country_represented(self, country_id: str) -> bool:
        return len(self.projects_by_country(country_id)) > 0

    def find_project_by_name(self, name: str) -> ProjectRecord | None:
        for project in self.list_projects():
            if project.project_name == name:
                return project
        return None

    def projects_by_region(self, region_id: str) -> tuple[ProjectRecord, ...]:
        return self.region_cache.get_or_compute(
            normalize_token(region_id), self._compute_projects_by_region
        )

    def _compute_projects_by_region(self, key: str) -> tuple[ProjectRecord, ...]:
        matched: dict[str, ProjectRecord] = {}
        for country_id in self.map_data.countries_by_region(key):
            for project in self.projects_by_country(country_id):
                matched.setdefault(project.project_name, project)
        for project in self.store.records:
            if key in split_tokens(project.location):
                matched.setdefault(project.project_name, project)
        return tuple(sorted(matched.values(), key=_project_sort_key))

    def countries_for_selection(self, selection: Selection) -> list[str]:
        """Countries to highlight for the current selection."""
        if isinstance(selection, NoSelection):
            return []
        if isinstance(selection, CountrySelection):
            return [normalize_token(country) for country in selection.countries]
        if isinstance(selection, ProjectSelection):
            return self.project_countries_of(selection.project)
        if isinstance(selection, OrganizationSelection):
            return self.organization_countries(selection.organization)
        raise TypeError(f"Unsupported selection type: {type(selection).__name__}")

    def country_name(self, country_id: str) -> str:
        return country_name(country_id)

    def hemisphere_of(self, country_id: str) -> str:
        return self.map_data.hemisphere_of(country_id)
