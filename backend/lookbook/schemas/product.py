"""
Catalog product, user profile and candidate pool schemas.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Literal, Optional, Union

from ..config import settings

Category = Literal["top", "bottom", "shoes"]
ProductId = Union[int, str]

# Outfit slot -> candidate pool attribute
SLOTS: Dict[str, str] = {"top": "tops", "bottom": "bottoms", "shoes": "shoes"}


class CamelModel(BaseModel):
    """Snake-case fields in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(CamelModel):
    """Canonical catalog product (see reco.normalize for ingestion)"""
    id: ProductId
    name: str = "Unnamed Product"
    price: float = Field(0.0, ge=0)
    brand: str = "Zara"
    color: str = "N/A"
    category: Category
    description: str = ""
    images: List[str] = Field(default_factory=list)
    url: str = "#"
    occasions: List[str] = Field(default_factory=list)
    style_tags: List[str] = Field(default_factory=list)
    style_categories: List[str] = Field(default_factory=list)
    body_fits: List[str] = Field(default_factory=list)
    fabric_properties: List[str] = Field(default_factory=list)
    formality_level: Optional[float] = None
    availability: Optional[bool] = None
    relevance_score: float = 0.0

    @property
    def image(self) -> str:
        return self.images[0] if self.images else "/placeholder.svg"


class PriceRange(CamelModel):
    """Total outfit budget"""
    min: float = Field(default_factory=lambda: settings.DEFAULT_PRICE_MIN, ge=0)
    max: Optional[float] = Field(default_factory=lambda: settings.DEFAULT_PRICE_MAX)
    is_unlimited: bool = False

    @property
    def unlimited(self) -> bool:
        return self.is_unlimited or self.max is None or self.max >= settings.UNLIMITED_PRICE_CAP

    @property
    def upper(self) -> float:
        return settings.UNLIMITED_PRICE_CAP if self.unlimited else float(self.max)

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.upper


class ColorStrategy(CamelModel):
    primary: List[str] = Field(default_factory=list)
    avoid: List[str] = Field(default_factory=list)


class UserProfile(CamelModel):
    """Per-request styling profile; treated as read-only by the pipeline"""
    occasion: str = "everyday"
    price_range: PriceRange = Field(default_factory=PriceRange)
    style_keywords: List[str] = Field(default_factory=list)
    body_profile: Optional[Dict[str, Any]] = None
    color_strategy: Optional[ColorStrategy] = None

    @property
    def preferred_colors(self) -> List[str]:
        return list(self.color_strategy.primary) if self.color_strategy else []


class FeedbackEntry(CamelModel):
    """A past liked/disliked outfit"""
    outfit_name: str
    feedback_type: Literal["like", "dislike"]
    reason: Optional[str] = None
    feedback_text: Optional[str] = None


class CandidatePool(BaseModel):
    """Capped per-category shortlists, each sorted by relevance descending"""
    tops: List[Product] = Field(default_factory=list)
    bottoms: List[Product] = Field(default_factory=list)
    shoes: List[Product] = Field(default_factory=list)

    def for_slot(self, slot: str) -> List[Product]:
        return getattr(self, SLOTS[slot])
