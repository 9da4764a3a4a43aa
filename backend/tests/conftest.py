"""
Shared fixtures for the lookbook test suite.
"""
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

# Keep the suite off any real database / provider configured in .env
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("OPENAI_API_KEY", "")
os.environ.setdefault("GEMINI_API_KEY", "")

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from lookbook.schemas import CandidatePool, OutfitProposal, PriceRange, Product, UserProfile  # noqa: E402
from lookbook.utils.llm_client import CompletionClient  # noqa: E402


class FakeCompletionClient(CompletionClient):
    """Returns canned completion text and records every prompt it receives."""

    service = "fake"
    model = "fake-model"

    def __init__(self, response: Union[str, Callable[[str], str]]):
        self.response = response
        self.prompts: List[str] = []
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, prompt, response_format="json_object", temperature=None):
        self.prompts.append(prompt)
        self.calls.append({"response_format": response_format, "temperature": temperature})
        return self.response(prompt) if callable(self.response) else self.response


def raw_row(product_id, category: str, price: float = 40.0, **extra) -> Dict[str, Any]:
    row = {
        "id": product_id,
        "product_name": f"{category} {product_id}",
        "category": category,
        "price": price,
        "brand": "Brand",
        "colour": "black",
        "description": "A comfortable piece",
        "images": [f"https://cdn.example.com/{category}/{product_id}.jpg"],
        "product_url": f"https://shop.example.com/{product_id}",
    }
    row.update(extra)
    return row


def make_product(product_id, category: str = "top", score: float = 0.0, price: float = 40.0, **extra) -> Product:
    fields = {
        "id": product_id,
        "name": f"{category} {product_id}",
        "price": price,
        "category": category,
        "images": [f"https://cdn.example.com/{product_id}.jpg"],
        "relevance_score": score,
    }
    fields.update(extra)
    return Product(**fields)


def make_proposal(number: int, top, bottom, shoes, **extra) -> OutfitProposal:
    return OutfitProposal(
        outfit_number=number,
        name=extra.pop("name", f"Look {number}"),
        top={"id": top},
        bottom={"id": bottom},
        shoes={"id": shoes},
        **extra,
    )


def completion_json(outfits: List[Dict[str, Any]]) -> str:
    return json.dumps({"outfits": outfits})


def outfit_dict(number: int, top, bottom, shoes, **extra) -> Dict[str, Any]:
    data = {
        "outfitNumber": number,
        "name": f"Look {number}",
        "top": {"id": top},
        "bottom": {"id": bottom},
        "shoes": {"id": shoes},
        "totalPrice": 1,
        "withinBudget": True,
        "whyItWorks": "Balanced proportions",
        "stylistNotes": ["Roll the sleeves"],
        "confidenceScore": 92,
    }
    data.update(extra)
    return data


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        occasion="work",
        price_range=PriceRange(min=50, max=200),
        style_keywords=["classic minimal"],
    )


@pytest.fixture
def catalog() -> Dict[str, List[Dict[str, Any]]]:
    """Nine of each slot, ids 1xx tops / 2xx bottoms / 3xx shoes"""
    return {
        "tops": [raw_row(100 + i, "top", price=30 + i) for i in range(9)],
        "bottoms": [raw_row(200 + i, "bottom", price=40 + i) for i in range(9)],
        "shoes": [raw_row(300 + i, "shoes", price=50 + i) for i in range(9)],
    }


@pytest.fixture
def pool() -> CandidatePool:
    return CandidatePool(
        tops=[make_product(i, "top", score=100 - i) for i in range(1, 4)],
        bottoms=[make_product(10 + i, "bottom", score=100 - i) for i in range(1, 4)],
        shoes=[make_product(20 + i, "shoes", score=100 - i) for i in range(1, 4)],
    )


@pytest.fixture
def db_session():
    """Session on a private in-memory catalog, shared across threads"""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from lookbook.models import Base

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def seed_catalog(db, count: int = 9) -> None:
    """count each of shirts (1xx), trousers (2xx) and loafers (3xx), priced 30-60"""
    from lookbook.models import CatalogProduct

    names = {"top": "Oxford Shirt", "bottom": "Chino Trouser", "shoes": "Leather Loafer"}
    for offset, (slot, name) in enumerate(names.items(), start=1):
        for i in range(count):
            db.add(CatalogProduct(
                id=offset * 100 + i,
                product_name=f"{name} {i}",
                category=slot,
                price=30 + i * 3,
                brand="Uniqlo",
                colour="navy",
                description="Everyday staple",
                product_url=f"https://shop.example.com/{offset * 100 + i}",
                images=[f"https://cdn.example.com/{offset * 100 + i}.jpg"],
                occasions=["work"],
                availability=True,
            ))
    db.commit()
