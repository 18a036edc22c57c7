"""Utility helpers for logging, text normalization, and filesystem setup."""

from __future__ import annotations

import json
import logging
import unicodedata
from pathlib import Path
from typing import Any, Iterable


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure root logging to console and optionally a file."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def ensure_directories(paths: Iterable[Path]) -> None:
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, sort_keys=True, ensure_ascii=False)
        fh.write("\n")


def normalize_token(value: str) -> str:
    """Canonical form of a country or organization identifier."""
    return value.strip().casefold()


def normalize_country_key(country_id: str) -> str:
    """Country identity used for lookups; map ids spell spaces as underscores."""
    return normalize_token(country_id).replace("_", " ")


def split_tokens(raw: str) -> list[str]:
    """Split a comma-separated field into normalized tokens, keeping empties."""
    return [normalize_token(part) for part in raw.split(",")]


def locale_sort_key(value: str) -> tuple[str, str]:
    """Sort key approximating locale-aware collation.

    Accents and case are ignored on the first pass so "Éco" sorts next to
    "eco"; the raw value breaks ties so the order stays total.
    """
    folded = unicodedata.normalize("NFKD", value)
    without_marks = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return (without_marks.casefold(), value)
