"""Map geometry and region catalog loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from .dataset import read_structured_file
from .models import CountryGeometry, Dot, Region
from .util import normalize_country_key, normalize_token

_LOGGER = logging.getLogger("dotsmap.map_data")


class MapData:
    """Read-only index over country dot clouds and the region catalog."""

    def __init__(self, countries: Iterable[CountryGeometry], regions: Iterable[Region] = ()) -> None:
        self.countries: tuple[CountryGeometry, ...] = tuple(countries)
        self.regions: tuple[Region, ...] = tuple(regions)
        self._countries_by_id = {normalize_country_key(country.id): country for country in self.countries}
        self._regions_by_id = {region.id: region for region in self.regions}

    def get_map_entry(self, country_id: str) -> CountryGeometry | None:
        return self._countries_by_id.get(normalize_country_key(country_id))

    def get_region(self, region_id: str) -> Region | None:
        return self._regions_by_id.get(normalize_token(region_id))

    def has_country(self, country_id: str) -> bool:
        return normalize_country_key(country_id) in self._countries_by_id

    def countries_by_region(self, region_id: str) -> tuple[str, ...]:
        """Member countries: catalog members first, then geometries tagged with the region."""
        key = normalize_token(region_id)
        members: list[str] = []
        region = self._regions_by_id.get(key)
        if region is not None:
            members.extend(region.countries)
        members.extend(country.id for country in self.countries if country.region == key)
        resolved: list[str] = []
        for member in members:
            entry = self.get_map_entry(member)
            resolved.append(entry.id if entry is not None else member)
        return tuple(dict.fromkeys(resolved))

    def dots_for(self, key: str) -> tuple[Dot, ...]:
        """Dots of a country, or of every member country when key is a region."""
        country = self.get_map_entry(key)
        if country is not None:
            return country.dots
        dots: list[Dot] = []
        for member in self.countries_by_region(key):
            entry = self.get_map_entry(member)
            if entry is not None:
                dots.extend(entry.dots)
        return tuple(dots)

    def hemisphere_of(self, country_id: str) -> str:
        dots = self.dots_for(country_id)
        if not dots:
            return "east"
        mean_x = sum(dot.x for dot in dots) / len(dots)
        return "west" if mean_x < 0.5 else "east"


def parse_map_data(raw: Any, source: str = "<map>") -> MapData:
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {source}")
    countries_raw = raw.get("countries", [])
    regions_raw = raw.get("regions", [])
    if not isinstance(countries_raw, list):
        raise ValueError(f"Expected list for 'countries' in {source}")
    if regions_raw is None:
        regions_raw = []
    if not isinstance(regions_raw, list):
        raise ValueError(f"Expected list for 'regions' in {source}")

    countries: list[CountryGeometry] = []
    seen_countries: set[str] = set()
    for idx, item in enumerate(countries_raw):
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected mapping at countries[{idx}] in {source}")
        country = CountryGeometry.from_mapping(item)
        key = normalize_country_key(country.id)
        if key in seen_countries:
            raise ValueError(f"Duplicate country id '{country.id}' in {source}")
        seen_countries.add(key)
        countries.append(country)

    regions: list[Region] = []
    seen_regions: set[str] = set()
    for idx, item in enumerate(regions_raw):
        if not isinstance(item, Mapping):
            raise ValueError(f"Expected mapping at regions[{idx}] in {source}")
        region = Region.from_mapping(item)
        if region.id in seen_regions:
            raise ValueError(f"Duplicate region id '{region.id}' in {source}")
        seen_regions.add(region.id)
        regions.append(region)
    return MapData(countries, regions)


def load_map_data(path: Path) -> MapData:
    """Load country dot clouds and the region catalog from YAML or JSON."""
    if not path.exists():
        raise FileNotFoundError(f"Map data file not found: {path}")
    map_data = parse_map_data(read_structured_file(path), str(path))
    _LOGGER.info(
        "Loaded %d country geometries and %d regions from %s",
        len(map_data.countries),
        len(map_data.regions),
        path,
    )
    return map_data
