"""
Pydantic schemas for the lookbook API.

Import all schemas here for easy access.
"""
from .common import HealthResponse
from .product import (
    SLOTS,
    CandidatePool,
    ColorStrategy,
    FeedbackEntry,
    PriceRange,
    Product,
    UserProfile,
)
from .outfit import (
    ColorSummary,
    EnrichedOutfit,
    GenerateOutfitsRequest,
    GenerateOutfitsResponse,
    InlineCatalog,
    OutfitItem,
    OutfitProposal,
    ProductRef,
)

__all__ = [
    # Common
    "HealthResponse",
    # Catalog / profile
    "SLOTS",
    "CandidatePool",
    "ColorStrategy",
    "FeedbackEntry",
    "PriceRange",
    "Product",
    "UserProfile",
    # Outfit
    "ColorSummary",
    "EnrichedOutfit",
    "GenerateOutfitsRequest",
    "GenerateOutfitsResponse",
    "InlineCatalog",
    "OutfitItem",
    "OutfitProposal",
    "ProductRef",
]
