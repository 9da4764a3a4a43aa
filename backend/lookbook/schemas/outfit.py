"""
Outfit proposal, enriched outfit and request/response schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional

from .product import CamelModel, FeedbackEntry, ProductId, UserProfile


class ProductRef(BaseModel):
    """Reference to a catalog product by id; None when the completion left it out or repair ran out of substitutes"""
    id: Optional[ProductId] = None


class OutfitProposal(CamelModel):
    """One raw outfit from the completion service, before repair"""
    outfit_number: Optional[int] = None
    name: str = ""
    top: ProductRef = Field(default_factory=ProductRef)
    bottom: ProductRef = Field(default_factory=ProductRef)
    shoes: ProductRef = Field(default_factory=ProductRef)
    total_price: Optional[float] = None
    within_budget: Optional[bool] = None
    why_it_works: str = ""
    stylist_notes: List[str] = Field(default_factory=list)
    confidence_score: Optional[float] = None

    @field_validator("top", "bottom", "shoes", mode="before")
    @classmethod
    def _unresolved_ref(cls, value: Any) -> Any:
        # null or scalar slots resolve to nothing and fall back downstream
        if isinstance(value, (dict, ProductRef)):
            return value
        return {"id": None}

    @field_validator("stylist_notes", mode="before")
    @classmethod
    def _notes_as_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class OutfitItem(CamelModel):
    """Resolved product inside an enriched outfit"""
    id: ProductId
    name: str
    brand: str
    price: float
    images: List[str] = Field(default_factory=list)
    image: str
    url: str
    product_url: str
    color: str
    description: str = ""
    category: str


class EnrichedOutfit(CamelModel):
    """Final outfit handed back to the caller"""
    id: str
    name: str
    total_price: float
    within_budget: bool
    quality_score: float
    items: List[OutfitItem]
    why_it_works: str
    stylist_notes: List[str] = Field(default_factory=list)
    color_score: int = 0
    color_harmony: str = "acceptable"
    is_fallback: bool = False


class ColorSummary(CamelModel):
    average_score: float = 0.0
    harmony_counts: Dict[str, int] = Field(default_factory=dict)


class InlineCatalog(BaseModel):
    """Raw catalog rows supplied with the request instead of a catalog query"""
    tops: List[Dict[str, Any]] = Field(default_factory=list)
    bottoms: List[Dict[str, Any]] = Field(default_factory=list)
    shoes: List[Dict[str, Any]] = Field(default_factory=list)


class GenerateOutfitsRequest(CamelModel):
    """Input for outfit generation"""
    profile: UserProfile
    feedback: List[FeedbackEntry] = Field(default_factory=list)
    products: Optional[InlineCatalog] = None


class GenerateOutfitsResponse(CamelModel):
    """Outfit generation result"""
    success: bool = True
    outfits: List[EnrichedOutfit]
    color_summary: ColorSummary = Field(default_factory=ColorSummary)
    diversity: Dict[str, int] = Field(default_factory=dict)
    low_inventory: List[str] = Field(default_factory=list)
    timings: Dict[str, float] = Field(default_factory=dict)
