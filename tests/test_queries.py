from __future__ import annotations

from conftest import make_store

from dotsmap.dataset import DatasetStore
from dotsmap.models import (
    CountrySelection,
    NoSelection,
    OrganizationSelection,
    ProjectSelection,
)
from dotsmap.queries import ProjectQueries, country_name


def _names(projects) -> list[str]:
    return [project.project_name for project in projects]


class CountingStore(DatasetStore):
    def __init__(self, records) -> None:
        super().__init__(records)
        self.reads = 0

    @property
    def records(self):
        self.reads += 1
        return self._records


def test_end_to_end_alpha_beta() -> None:
    store = make_store(
        {"projectName": "Beta", "organization": "Acme", "location": "FR"},
        {"projectName": "Alpha", "organization": "Acme", "location": "US, CA"},
    )
    queries = ProjectQueries(store)
    assert queries.list_countries() == ["ca", "fr", "us"]
    assert _names(queries.projects_by_country("us")) == ["Alpha"]
    assert _names(queries.projects_by_organization("acme")) == ["Alpha", "Beta"]


def test_list_countries_dedupes_and_sorts() -> None:
    queries = ProjectQueries(
        make_store(
            {"projectName": "a", "organization": "x", "location": "US, fr"},
            {"projectName": "b", "organization": "x", "location": "fr"},
            {"projectName": "c", "organization": "x", "location": "DE"},
        )
    )
    assert queries.list_countries() == ["de", "fr", "us"]


def test_list_countries_drops_empty_tokens() -> None:
    queries = ProjectQueries(
        make_store({"projectName": "a", "organization": "x", "location": "us, , ,ca,"})
    )
    assert queries.list_countries() == ["ca", "us"]


def test_list_organizations(queries) -> None:
    assert queries.list_organizations() == ["acme", "acme labs", "globex", "initech"]


def test_list_projects_sorted_by_name(queries) -> None:
    assert _names(queries.list_projects()) == ["Alpha", "Beta", "Delta", "Epsilon", "Gamma"]


def test_project_countries_of(queries) -> None:
    gamma = queries.find_project_by_name("Gamma")
    assert gamma is not None
    assert queries.project_countries_of(gamma) == ["de", "fr"]


def test_projects_by_country_normalizes_key(queries) -> None:
    expected = queries.projects_by_country("us")
    assert _names(expected) == ["Alpha", "Epsilon"]
    assert queries.projects_by_country(" US ") == expected
    assert queries.projects_by_country("Us") == expected


def test_projects_by_country_replaces_underscores() -> None:
    queries = ProjectQueries(
        make_store({"projectName": "a", "organization": "x", "location": "South Africa"})
    )
    assert _names(queries.projects_by_country("south_africa")) == ["a"]


def test_projects_by_country_is_memoized(store) -> None:
    counting = CountingStore(store.records)
    queries = ProjectQueries(counting)

    first = queries.projects_by_country("fr")
    reads_after_first = counting.reads
    second = queries.projects_by_country(" FR ")

    assert first is second
    assert counting.reads == reads_after_first
    assert queries.country_cache.misses == 1
    assert queries.country_cache.hits == 1
    assert len(queries.country_cache) == 1

    queries.projects_by_country("de")
    assert queries.country_cache.misses == 2


def test_projects_by_organization_is_substring_match(queries) -> None:
    assert _names(queries.projects_by_organization("ACME")) == ["Alpha", "Beta", "Gamma"]
    assert _names(queries.projects_by_organization("labs")) == ["Gamma"]
    assert queries.projects_by_organization("nobody") == []


def test_organization_countries_keeps_repeats(queries) -> None:
    assert queries.organization_countries("globex") == ["br", "us", "de", "fr"]
    assert queries.organization_countries("acme") == ["us", "ca", "fr", "de", "fr"]


def test_is_country_represented(queries) -> None:
    assert queries.is_country_represented("BR")
    assert not queries.is_country_represented("au")


def test_find_project_by_name_is_exact(queries) -> None:
    assert queries.find_project_by_name("Alpha") is not None
    assert queries.find_project_by_name("alpha") is None
    assert queries.find_project_by_name("Missing") is None


def test_list_project_types_in_dataset_order(queries) -> None:
    assert queries.list_project_types() == ["Research", "Pilot"]


def test_projects_by_region_unions_members_and_literal_token(queries) -> None:
    assert _names(queries.projects_by_region("europe")) == ["Beta", "Gamma"]
    assert _names(queries.projects_by_region("GLOBAL")) == ["Delta"]
    assert queries.projects_by_region("oceania") == ()


def test_projects_by_region_dedupes_overlapping_matches() -> None:
    from dotsmap.map_data import parse_map_data

    map_data = parse_map_data(
        {
            "countries": [
                {"id": "fr", "region": "europe", "dots": [{"x": 0.4, "y": 0.2}]},
                {"id": "de", "region": "europe", "dots": [{"x": 0.5, "y": 0.2}]},
            ],
            "regions": [{"id": "europe", "countries": ["fr", "de"]}],
        }
    )
    queries = ProjectQueries(
        make_store(
            {"projectName": "Both", "organization": "x", "location": "fr, de, europe"},
            {"projectName": "Only", "organization": "x", "location": "Europe"},
        ),
        map_data,
    )
    assert _names(queries.projects_by_region("europe")) == ["Both", "Only"]
    assert queries.region_cache.misses == 1


def test_countries_for_selection(queries) -> None:
    alpha = queries.find_project_by_name("Alpha")
    assert alpha is not None
    assert queries.countries_for_selection(NoSelection()) == []
    assert queries.countries_for_selection(CountrySelection(countries=(" FR ",))) == ["fr"]
    assert queries.countries_for_selection(ProjectSelection(project=alpha)) == ["ca", "us"]
    assert queries.countries_for_selection(OrganizationSelection(organization="initech")) == ["global"]


def test_countries_for_selection_rejects_unknown_type(queries) -> None:
    import pytest

    with pytest.raises(TypeError):
        queries.countries_for_selection("fr")  # type: ignore[arg-type]


def test_country_name_override_table() -> None:
    assert country_name("US") == "united states"
    assert country_name("fr") == "fr"


def test_hemisphere_of(queries) -> None:
    assert queries.hemisphere_of("us") == "west"
    assert queries.hemisphere_of("de") == "east"
    assert queries.hemisphere_of("unknown") == "east"
