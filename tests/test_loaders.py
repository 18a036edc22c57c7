from __future__ import annotations

import json
from pathlib import Path

import pytest

from dotsmap.dataset import load_dataset, parse_projects
from dotsmap.map_data import load_map_data, parse_map_data


def test_load_dataset_yaml(tmp_path: Path) -> None:
    path = tmp_path / "dataset.yaml"
    path.write_text(
        "- projectName: Alpha\n"
        "  organization: Acme\n"
        "  location: US, CA\n"
        "- project_name: Beta\n"
        "  organization: Acme\n"
        "  location: FR\n"
        "  project_type: Pilot\n",
        encoding="utf-8",
    )
    store = load_dataset(path)
    assert len(store) == 2
    assert [project.project_name for project in store] == ["Alpha", "Beta"]
    assert store.records[0].project_type == ""
    assert store.records[1].project_type == "Pilot"


def test_load_dataset_json(tmp_path: Path) -> None:
    path = tmp_path / "dataset.json"
    path.write_text(
        json.dumps([{"projectName": "Alpha", "organization": "Acme", "location": "US"}]),
        encoding="utf-8",
    )
    assert load_dataset(path).records[0].location == "US"


@pytest.mark.parametrize(
    ("rows", "message"),
    [
        ({"projectName": "a"}, "Expected list"),
        (["row"], "Expected mapping at index 0"),
        ([{"organization": "x", "location": "us"}], "projectName"),
        ([{"projectName": "a", "location": "us"}], "organization"),
        ([{"projectName": "a", "organization": "x"}], "location"),
        ([{"projectName": "a", "organization": "x", "location": 3}], "location"),
    ],
)
def test_malformed_rows_are_rejected(rows, message) -> None:
    with pytest.raises(ValueError, match=message):
        parse_projects(rows)


def test_duplicate_project_names_are_rejected() -> None:
    rows = [
        {"projectName": "a", "organization": "x", "location": "us"},
        {"projectName": "a", "organization": "y", "location": "fr"},
    ]
    with pytest.raises(ValueError, match="Duplicate projectName 'a'"):
        parse_projects(rows)


def test_project_names_are_case_sensitive() -> None:
    rows = [
        {"projectName": "a", "organization": "x", "location": "us"},
        {"projectName": "A", "organization": "y", "location": "fr"},
    ]
    assert len(parse_projects(rows)) == 2


def test_missing_dataset_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_dataset(tmp_path / "missing.yaml")


def test_map_data_normalizes_ids_and_indexes_regions(tmp_path: Path) -> None:
    path = tmp_path / "map.yaml"
    path.write_text(
        "countries:\n"
        "  - id: US\n"
        "    region: North-America\n"
        "    dots: [{x: 0.2, y: 0.3}]\n"
        "  - id: mx\n"
        "    region: north-america\n"
        "    dots: [{x: 0.2, y: 0.5, radius: 4}]\n"
        "regions:\n"
        "  - id: Global\n"
        "    anchor: {x: 0.35, y: 0.5}\n",
        encoding="utf-8",
    )
    map_data = load_map_data(path)
    assert map_data.get_map_entry(" us ") is not None
    assert map_data.get_map_entry("mx").dots[0].radius == 4.0
    assert map_data.countries_by_region("north-america") == ("us", "mx")
    assert len(map_data.dots_for("north-america")) == 2
    assert map_data.get_region("GLOBAL").anchor == (0.35, 0.5)
    assert map_data.dots_for("atlantis") == ()


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ([], "Expected mapping"),
        ({"countries": [{"id": "us", "dots": [{"x": 1.5, "y": 0.2}]}]}, "between 0 and 1"),
        ({"countries": [{"id": "us", "dots": [{"x": 0.1}]}]}, "us.dots\\[0\\].y"),
        ({"countries": [{"id": "us"}, {"id": "US"}]}, "Duplicate country id 'us'"),
        ({"countries": [{"id": "south_africa"}, {"id": "South Africa"}]}, "Duplicate country id"),
        ({"countries": [], "regions": [{"id": "eu", "anchor": [0.1, 0.2]}]}, "eu.anchor"),
        ({"countries": [], "regions": [{"id": "eu"}, {"id": "EU"}]}, "Duplicate region id 'eu'"),
    ],
)
def test_malformed_map_data(raw, message) -> None:
    with pytest.raises(ValueError, match=message):
        parse_map_data(raw)


def test_map_lookups_treat_underscores_as_spaces() -> None:
    map_data = parse_map_data(
        {
            "countries": [{"id": "south_africa", "region": "africa", "dots": [{"x": 0.55, "y": 0.8}]}],
            "regions": [{"id": "africa", "countries": ["South Africa"]}],
        }
    )
    entry = map_data.get_map_entry("South Africa")
    assert entry is not None
    assert entry.id == "south_africa"
    assert map_data.has_country("south africa")
    assert len(map_data.dots_for("africa")) == 1
