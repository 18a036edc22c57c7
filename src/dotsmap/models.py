"""Domain models shared across query, aggregation and projection modules."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Union


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _optional_str(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Expected string for '{field_name}'")
    return value.strip()


def _unit_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected numeric value for '{field_name}'")
    number = float(value)
    if number < 0.0 or number > 1.0:
        raise ValueError(f"{field_name} must be between 0 and 1")
    return number


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    """One row of the project dataset."""

    project_name: str
    organization: str
    location: str
    project_type: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ProjectRecord:
        # project names stay case-sensitive
        project_name = _require_str(
            _first_present(data, "projectName", "project_name"), "projectName"
        )
        organization = _first_present(data, "organization")
        location = _first_present(data, "location")
        if not isinstance(organization, str):
            raise ValueError("Expected string for 'organization'")
        if not isinstance(location, str):
            raise ValueError("Expected string for 'location'")
        return cls(
            project_name=project_name,
            organization=organization,
            location=location,
            project_type=_optional_str(
                _first_present(data, "projectType", "project_type"), "projectType"
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectName": self.project_name,
            "organization": self.organization,
            "location": self.location,
            "projectType": self.project_type,
        }


@dataclass(frozen=True, slots=True)
class Dot:
    """Map dot, positioned relative to the rendering surface."""

    x: float
    y: float
    radius: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], field_name: str = "dot") -> Dot:
        radius_raw = data.get("radius")
        radius: float | None
        if radius_raw is None:
            radius = None
        elif isinstance(radius_raw, (int, float)) and not isinstance(radius_raw, bool) and radius_raw > 0:
            radius = float(radius_raw)
        else:
            raise ValueError(f"Expected positive number for '{field_name}.radius'")
        return cls(
            x=_unit_float(data.get("x"), f"{field_name}.x"),
            y=_unit_float(data.get("y"), f"{field_name}.y"),
            radius=radius,
        )


@dataclass(frozen=True, slots=True)
class CountryGeometry:
    """Dot cloud of one country as supplied by the map data."""

    id: str
    region: str
    dots: tuple[Dot, ...]
    color: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CountryGeometry:
        country_id = _require_str(data.get("id"), "countries[].id").casefold()
        region = _optional_str(data.get("region"), f"{country_id}.region").casefold()
        dots_raw = data.get("dots", [])
        if not isinstance(dots_raw, list):
            raise ValueError(f"Expected list for '{country_id}.dots'")
        dots: list[Dot] = []
        for idx, item in enumerate(dots_raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"Expected mapping for '{country_id}.dots[{idx}]'")
            dots.append(Dot.from_mapping(item, f"{country_id}.dots[{idx}]"))
        color_raw = data.get("color")
        color = _require_str(color_raw, f"{country_id}.color") if color_raw is not None else None
        return cls(id=country_id, region=region, dots=tuple(dots), color=color)


@dataclass(frozen=True, slots=True)
class Region:
    """Named group of countries, optionally pinned to a fixed relative anchor."""

    id: str
    countries: tuple[str, ...] = ()
    anchor: tuple[float, float] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Region:
        region_id = _require_str(data.get("id"), "regions[].id").casefold()
        countries_raw = data.get("countries", [])
        if countries_raw is None:
            countries_raw = []
        if not isinstance(countries_raw, list):
            raise ValueError(f"Expected list for '{region_id}.countries'")
        countries = tuple(
            _require_str(item, f"{region_id}.countries[]").casefold() for item in countries_raw
        )

        anchor_raw = data.get("anchor")
        anchor: tuple[float, float] | None
        if anchor_raw is None:
            anchor = None
        elif isinstance(anchor_raw, Mapping):
            anchor = (
                _unit_float(anchor_raw.get("x"), f"{region_id}.anchor.x"),
                _unit_float(anchor_raw.get("y"), f"{region_id}.anchor.y"),
            )
        else:
            raise ValueError(f"Expected mapping for '{region_id}.anchor'")
        return cls(id=region_id, countries=countries, anchor=anchor)


class Granularity(enum.Enum):
    COUNTRY = "country"
    REGION = "region"
    MIXED = "mixed"

    @classmethod
    def parse(cls, value: str) -> Granularity:
        try:
            return cls(value.strip().casefold())
        except ValueError:
            allowed = ", ".join(item.value for item in cls)
            raise ValueError(f"Unknown granularity '{value}'. Expected one of: {allowed}") from None


@dataclass(frozen=True, slots=True)
class AggregateEntry:
    """A country or region with its project count and normalized magnitude."""

    key: str
    project_count: int
    relative_magnitude: float
    kind: str = "country"

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "project_count": self.project_count,
            "relative_magnitude": self.relative_magnitude,
            "kind": self.kind,
        }


@dataclass(frozen=True, slots=True)
class Surface:
    """Measured rendering surface in pixels."""

    width: float
    height: float


@dataclass(frozen=True, slots=True)
class ScreenCircle:
    """Render artifact for one aggregate entry."""

    key: str
    x: float
    y: float
    radius: float
    fill_color: str
    text_color: str
    display_label: str
    title: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "fill_color": self.fill_color,
            "text_color": self.text_color,
            "display_label": self.display_label,
            "title": self.title,
        }


@dataclass(frozen=True, slots=True)
class NoSelection:
    pass


@dataclass(frozen=True, slots=True)
class CountrySelection:
    countries: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ProjectSelection:
    project: ProjectRecord


@dataclass(frozen=True, slots=True)
class OrganizationSelection:
    organization: str


Selection = Union[NoSelection, CountrySelection, ProjectSelection, OrganizationSelection]
