"""
Outfit assembly: scoring, candidate selection, completion, repair and enrichment.
"""
from .pipeline import OutfitPipeline, generate_outfits

__all__ = ["OutfitPipeline", "generate_outfits"]
