"""Wiring of the dataset, map geometry and derived query objects."""

from __future__ import annotations

from dataclasses import dataclass

from .aggregate import RegionAggregator
from .config import AppConfig
from .dataset import DatasetStore, load_dataset
from .map_data import MapData, load_map_data
from .models import Granularity, NoSelection, ScreenCircle, Selection, Surface
from .projection import GeometricProjector, PreparedCountry, prepare_map
from .queries import ProjectQueries


@dataclass(frozen=True, slots=True)
class MapEngine:
    """All derived structures for one immutable dataset and map."""

    cfg: AppConfig
    store: DatasetStore
    map_data: MapData
    queries: ProjectQueries
    aggregator: RegionAggregator
    projector: GeometricProjector

    @classmethod
    def create(cls, cfg: AppConfig, store: DatasetStore, map_data: MapData) -> MapEngine:
        queries = ProjectQueries(store, map_data)
        return cls(
            cfg=cfg,
            store=store,
            map_data=map_data,
            queries=queries,
            aggregator=RegionAggregator(
                queries, map_data, collapse_regions=cfg.aggregate.collapse_regions
            ),
            projector=GeometricProjector(map_data, cfg.circles),
        )

    def prepared_countries(self) -> list[PreparedCountry]:
        return prepare_map(self.map_data.countries, self.queries, self.cfg.dots)

    def layout(
        self,
        surface: Surface | None,
        *,
        granularity: Granularity | str | None = None,
        selected_key: str | None = None,
        hovered_key: str | None = None,
    ) -> list[ScreenCircle]:
        entries = self.aggregator.aggregate(granularity or self.cfg.aggregate.granularity)
        return self.projector.screen_circles(
            entries, surface, selected_key=selected_key, hovered_key=hovered_key
        )

    def highlighted_countries(self, selection: Selection | None) -> list[str]:
        return self.queries.countries_for_selection(selection or NoSelection())


def load_engine(cfg: AppConfig) -> MapEngine:
    """Load the configured input files and build a ready engine."""
    return MapEngine.create(cfg, load_dataset(cfg.paths.dataset), load_map_data(cfg.paths.map))
