import html
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from catalog_search.models.product import ProductType
from catalog_search.schemas.catalog import RawProduct
from catalog_search.services.catalog_loader import CatalogSnapshot

TAG_RE = re.compile(r"<[^>]*>")
SPACE_RE = re.compile(r"\s+")

NUMBER = r"\d+(?:[.,]\d+)?"

# Multi-axis: "160 x 120 cm", "100 x 100 x 50 cm", "30×20cm"
MULTI_AXIS_RE = re.compile(
    rf"\b({NUMBER})\s*[x×]\s*({NUMBER})(?:\s*[x×]\s*({NUMBER}))?\s*cm\b",
    re.IGNORECASE,
)
# Labeled single axis: "Hoogte 24 cm", "Afmeting 30 cm", "diameter: 30,5 cm"
LABELED_RE = re.compile(
    r"\b(?:afmetingen?|hoogte|breedte|lengte|diepte|diameter|doorsnede|height|width|length|depth)"
    rf"\s*:?\s*(?:van\s+|ca\.?\s+|circa\s+)?({NUMBER})\s*cm\b",
    re.IGNORECASE,
)
# Bare value with a context word before or after: "circa 24 cm", "30 cm hoog"
CONTEXT_BEFORE_RE = re.compile(
    rf"(?:\bcirca|\bca\.|\bongeveer|\bruim)\s*({NUMBER})\s*cm\b", re.IGNORECASE
)
CONTEXT_AFTER_RE = re.compile(
    rf"\b({NUMBER})\s*cm\s+(?:hoog|breed|lang|diep|groot)\b", re.IGNORECASE
)

# Checked in order; the first matching rule wins. Patterns are unanchored so
# Dutch compounds ("sportbeeld", "bloemenvaas", "koffiemok") still match, while
# "afbeelding", "(bij)voorbeeld" and "beeldig" do not count as sculptures.
TYPE_RULES: Sequence[Tuple[ProductType, Tuple[str, ...]]] = (
    (ProductType.ONDERZETTER, ("onderzetter",)),
    (ProductType.KANDELAAR, ("kandela", "waxinelicht", "kaarshouder")),
    (ProductType.SCHILDERIJ, ("schilderij", r"gicl[eé]e", r"\bcanvas", "kunstdruk", "reproductie", "poster")),
    (ProductType.BEELD, (r"(?<!af)(?<!voor)beeld(?:en|je|jes)?\b", "beeldhouw", "sculptu", r"\bstatue", r"\bbrons\b")),
    (ProductType.VAAS, ("vaas", "vazen", r"\bvase")),
    (ProductType.MOK, (r"mok\b", "mokken", r"beker\b", r"\bmug\b")),
    (ProductType.SIERAAD, ("sieraa?d", "ketting", "armband", "oorbel", "broche", r"\bring\b")),
    (ProductType.KLOK, (r"klok\b", "klokken", "uurwerk", r"\bclock")),
    (ProductType.KUSSEN, ("kussen", "cushion")),
)


def strip_html(value: Optional[str]) -> str:
    if not value:
        return ""
    return SPACE_RE.sub(" ", html.unescape(TAG_RE.sub(" ", value))).strip()


def _number(value: str) -> str:
    return value.replace(",", ".")


def extract_dimensions(*texts: Optional[str]) -> Optional[str]:
    """
    First measurement in centimeters found in the (already stripped) texts,
    multi-axis before labeled before bare values. ``None`` when nothing matches.
    """
    text = " ".join(t for t in texts if t)
    if not text:
        return None

    match = MULTI_AXIS_RE.search(text)
    if match:
        axes = [_number(axis) for axis in match.groups() if axis]
        return " x ".join(axes) + " cm"

    for pattern in (LABELED_RE, CONTEXT_BEFORE_RE, CONTEXT_AFTER_RE):
        match = pattern.search(text)
        if match:
            return f"{_number(match.group(1))} cm"

    return None


def _matches(text: str, patterns: Sequence[str]) -> bool:
    return any(re.search(p, text) for p in patterns)


def detect_type(title: str, category_names: Sequence[str] = (), description: str = "") -> ProductType:
    """
    Classifies a product from its title, then its category names, then its
    description. Unresolvable records get ``ProductType.OVERIG``.
    """
    for signal in (title, " ".join(category_names), description):
        text = (signal or "").lower()
        if not text:
            continue
        for product_type, patterns in TYPE_RULES:
            if _matches(text, patterns):
                return product_type
    return ProductType.OVERIG


@dataclass
class NormalizedProduct:
    product: RawProduct
    embedding_text: str
    type: ProductType
    artist: Optional[str]
    dimensions: Optional[str]
    category_ids: List[int]
    tag_ids: List[int]


class CatalogNormalizer:
    def __init__(self, snapshot: CatalogSnapshot):
        self.snapshot = snapshot

    def build_embedding_text(self, product: RawProduct) -> str:
        category_names = [
            self.snapshot.category_names[cid]
            for cid in self.snapshot.category_ids_for(product.id)
        ]
        tag_names = [
            self.snapshot.visible_tag_names[tid]
            for tid in self.snapshot.tag_ids_for(product.id)
            if tid in self.snapshot.visible_tag_names
        ]
        parts = [
            product.title,
            product.full_title,
            strip_html(product.description),
            strip_html(product.content),
            self.snapshot.brand_name(product.brand_id),
            *category_names,
            *tag_names,
        ]
        return " ".join(p.strip() for p in parts if p and p.strip())

    def normalize(self, product: RawProduct) -> NormalizedProduct:
        description = strip_html(product.description)
        content = strip_html(product.content)
        category_ids = self.snapshot.category_ids_for(product.id)
        return NormalizedProduct(
            product=product,
            embedding_text=self.build_embedding_text(product),
            type=detect_type(
                product.title,
                [self.snapshot.category_names[cid] for cid in category_ids],
                description,
            ),
            artist=self.snapshot.brand_name(product.brand_id),
            dimensions=extract_dimensions(description, content),
            category_ids=category_ids,
            tag_ids=self.snapshot.tag_ids_for(product.id),
        )
