"""Per-country and per-region project counts with relative magnitudes."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .map_data import MapData
from .models import AggregateEntry, Granularity
from .queries import ProjectQueries
from .util import normalize_country_key, normalize_token

_LOGGER = logging.getLogger("dotsmap.aggregate")


def relative_entries(counts: Iterable[tuple[str, int, str]]) -> list[AggregateEntry]:
    """Drop zero counts and scale the rest against the largest count."""
    surviving = [(key, count, kind) for key, count, kind in counts if count > 0]
    if not surviving:
        return []
    max_count = max(count for _, count, _ in surviving)
    return [
        AggregateEntry(key=key, project_count=count, relative_magnitude=count / max_count, kind=kind)
        for key, count, kind in surviving
    ]


class RegionAggregator:
    """Groups dataset matches by country or region."""

    def __init__(
        self,
        queries: ProjectQueries,
        map_data: MapData | None = None,
        *,
        collapse_regions: Sequence[str] = ("europe", "global"),
    ) -> None:
        self.queries = queries
        self.map_data = map_data if map_data is not None else queries.map_data
        self.collapse_regions = tuple(normalize_token(region) for region in collapse_regions)

    def aggregate(self, granularity: Granularity | str = Granularity.MIXED) -> list[AggregateEntry]:
        if isinstance(granularity, str):
            granularity = Granularity.parse(granularity)
        if granularity is Granularity.COUNTRY:
            counts = self._country_counts(exclude_regions=())
        elif granularity is Granularity.REGION:
            counts = self._region_counts(region.id for region in self.map_data.regions)
        else:
            counts = [
                *self._country_counts(exclude_regions=self.collapse_regions),
                *self._region_counts(self.collapse_regions),
            ]
        entries = relative_entries(counts)
        _LOGGER.debug(
            "Aggregated %d entries at %s granularity (%d candidates)",
            len(entries),
            granularity.value,
            len(counts),
        )
        return entries

    def _country_counts(self, *, exclude_regions: Sequence[str]) -> list[tuple[str, int, str]]:
        collapsed = {
            normalize_country_key(member)
            for region_id in exclude_regions
            for member in self.map_data.countries_by_region(region_id)
        }
        counts: list[tuple[str, int, str]] = []
        seen: set[str] = set()
        for country_id in self.queries.list_countries():
            entry = self.map_data.get_map_entry(country_id)
            if entry is None or entry.id in seen or normalize_country_key(entry.id) in collapsed:
                continue
            seen.add(entry.id)
            counts.append((entry.id, len(self.queries.projects_by_country(entry.id)), "country"))
        return counts

    def _region_counts(self, region_ids: Iterable[str]) -> list[tuple[str, int, str]]:
        return [
            (region_id, len(self.queries.projects_by_region(region_id)), "region")
            for region_id in region_ids
        ]
