"""Loading and filtering the static country/capital catalog."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from src.quiz.models import WORLD_REGION, LearningItem


LOGGER = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "static" / "countries.json"


def _as_strings(value: Any, field_name: str, item_id: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(entry, str) for entry in value):
        raise ValueError(f"Catalog entry {item_id!r} has a malformed {field_name!r} list.")
    return tuple(entry.strip() for entry in value if entry.strip())


def parse_catalog_entry(entry: Dict[str, Any]) -> LearningItem:
    """Convert one raw catalog object into a :class:`LearningItem`."""
    item_id = entry.get("id")
    if not isinstance(item_id, str) or not item_id.strip():
        raise ValueError(f"Catalog entry is missing a string id: {entry!r}")

    for required in ("capital", "country", "region"):
        if not isinstance(entry.get(required), str) or not entry[required].strip():
            raise ValueError(f"Catalog entry {item_id!r} is missing {required!r}.")

    return LearningItem(
        id=item_id.strip(),
        primary_term=entry["capital"].strip(),
        primary_alternatives=_as_strings(entry.get("capitalAlternatives"), "capitalAlternatives", item_id),
        secondary_term=entry["country"].strip(),
        secondary_alternatives=_as_strings(entry.get("countryAlternatives"), "countryAlternatives", item_id),
        region=entry["region"].strip(),
        has_multiple_valid_primaries=bool(entry.get("multipleCapitals", False)),
    )


def load_catalog(path: Union[str, Path] = DEFAULT_CATALOG_PATH) -> List[LearningItem]:
    """Read the catalog JSON file; raises ``ValueError`` on malformed content."""
    catalog_path = Path(path)
    with catalog_path.open("r", encoding="utf-8") as handle:
        try:
            raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Catalog {catalog_path} is not valid JSON.") from exc

    if not isinstance(raw, list):
        raise ValueError(f"Catalog {catalog_path} must contain a JSON array.")

    items: List[LearningItem] = []
    seen: set[str] = set()
    for entry in raw:
        if not isinstance(entry, dict):
            raise ValueError(f"Catalog {catalog_path} contains a non-object entry: {entry!r}")
        item = parse_catalog_entry(entry)
        if item.id in seen:
            LOGGER.warning("Skipping duplicate catalog id %s in %s.", item.id, catalog_path)
            continue
        seen.add(item.id)
        items.append(item)

    LOGGER.info("Loaded %d catalog items from %s.", len(items), catalog_path)
    return items


def available_regions(items: Iterable[LearningItem]) -> List[str]:
    """Return ``World`` followed by every region in the catalog, sorted."""
    regions = {item.region for item in items}
    return [WORLD_REGION, *sorted(regions)]


def items_for_region(items: Iterable[LearningItem], region: str) -> List[LearningItem]:
    if region == WORLD_REGION:
        return list(items)
    return [item for item in items if item.region == region]
