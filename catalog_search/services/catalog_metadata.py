"""
Static catalog taxonomy used at query time: category names for result items
and the catalog summary the advice prompts quote from.

Loaded once per process from the catalog export directory and never mutated.
"""
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from catalog_search.core.config import settings
from catalog_search.models.product import ProductType

logger = logging.getLogger(__name__)

MAX_SUMMARY_THEMES = 25
MAX_SUMMARY_ARTISTS = 15


class CatalogMetadata:
    def __init__(
        self,
        category_names: Optional[Dict[int, str]] = None,
        artists: Optional[List[str]] = None,
    ):
        self.category_names = dict(category_names or {})
        self.artists = sorted(set(artists or []))
        self.types = [t.value for t in ProductType if t is not ProductType.OVERIG]

    @classmethod
    def from_directory(cls, directory: Path) -> "CatalogMetadata":
        directory = Path(directory)
        categories = _read_json(directory / "categories.json")
        brands = _read_json(directory / "brands.json")
        return cls(
            category_names={int(c["id"]): c["title"] for c in categories if c.get("title")},
            artists=[b["title"] for b in brands if b.get("title")],
        )

    def category_name(self, category_id: int) -> Optional[str]:
        return self.category_names.get(category_id)

    def summary(self) -> str:
        themes = sorted(set(self.category_names.values()))[:MAX_SUMMARY_THEMES]
        lines = [f"Beschikbare producttypes: {', '.join(self.types)}"]
        if themes:
            lines.append(f"Thema's en categorieën: {', '.join(themes)}")
        if self.artists:
            lines.append(
                f"Kunstenaars: {', '.join(self.artists[:MAX_SUMMARY_ARTISTS])}"
            )
        return "\n".join(lines)


def _read_json(path: Path) -> list:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning(f"⚠️ Catalog metadata file not found: {path}")
        return []


@lru_cache(maxsize=1)
def get_catalog_metadata() -> CatalogMetadata:
    metadata = CatalogMetadata.from_directory(Path(settings.CATALOG_DATA_DIR))
    logger.info(
        f"📚 Catalog metadata loaded: {len(metadata.category_names)} categories, "
        f"{len(metadata.artists)} artists"
    )
    return metadata
