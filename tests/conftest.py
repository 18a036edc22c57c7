from __future__ import annotations

import pytest

from dotsmap.dataset import DatasetStore, parse_projects
from dotsmap.map_data import parse_map_data
from dotsmap.queries import ProjectQueries


SAMPLE_ROWS = [
    {"projectName": "Alpha", "organization": "Acme", "location": "US, CA", "projectType": "Research"},
    {"projectName": "Beta", "organization": "Acme", "location": "FR", "projectType": "Pilot"},
    {"projectName": "Gamma", "organization": "Globex, Acme Labs", "location": "DE, fr", "projectType": "Research"},
    {"projectName": "Delta", "organization": "Initech", "location": "global"},
    {"projectName": "Epsilon", "organization": "Globex", "location": "BR, us", "projectType": ""},
]

SAMPLE_MAP = {
    "countries": [
        {"id": "us", "region": "north-america", "dots": [{"x": 0.2, "y": 0.3}, {"x": 0.3, "y": 0.4}]},
        {"id": "ca", "region": "north-america", "dots": [{"x": 0.2, "y": 0.2}]},
        {"id": "br", "region": "south-america", "dots": [{"x": 0.35, "y": 0.65}]},
        {"id": "fr", "region": "europe", "dots": [{"x": 0.4, "y": 0.2}]},
        {"id": "de", "region": "europe", "dots": [{"x": 0.6, "y": 0.2}, {"x": 0.6, "y": 0.4}]},
        {"id": "au", "region": "oceania", "dots": [{"x": 0.9, "y": 0.8}], "color": "#123456"},
    ],
    "regions": [
        {"id": "europe", "countries": ["fr", "de"]},
        {"id": "global", "anchor": {"x": 0.35, "y": 0.5}},
    ],
}


@pytest.fixture
def store() -> DatasetStore:
    return DatasetStore(parse_projects(SAMPLE_ROWS))


@pytest.fixture
def map_data():
    return parse_map_data(SAMPLE_MAP)


@pytest.fixture
def queries(store, map_data) -> ProjectQueries:
    return ProjectQueries(store, map_data)


def make_store(*rows: dict) -> DatasetStore:
    return DatasetStore(parse_projects(list(rows)))
