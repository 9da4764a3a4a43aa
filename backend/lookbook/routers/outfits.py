from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..reco.catalog import ProductCatalog
from ..reco.pipeline import OutfitPipeline
from ..schemas import GenerateOutfitsRequest, GenerateOutfitsResponse
from ..utils.cache import CompletionCache
from ..utils.llm_client import CompletionClient, get_completion_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2", tags=["outfits"])


def completion_client() -> CompletionClient:
    return get_completion_client()


def completion_cache(request: Request) -> Optional[CompletionCache]:
    return getattr(request.app.state, "completion_cache", None)


def product_catalog() -> ProductCatalog:
    return ProductCatalog()


@router.post("/outfits", response_model=GenerateOutfitsResponse)
async def create_outfits(
    req: GenerateOutfitsRequest,
    db: Session = Depends(get_db),
    client: CompletionClient = Depends(completion_client),
    cache: Optional[CompletionCache] = Depends(completion_cache),
    catalog: ProductCatalog = Depends(product_catalog),
):
    # Inline rows win over the stored catalog
    if req.products is not None:
        rows = req.products.model_dump()
    else:
        rows = catalog.fetch_all(db, req.profile.occasion, req.profile.price_range)

    pipeline = OutfitPipeline(client, cache=cache)
    return await pipeline.run(rows, req.profile, req.feedback)
