"""
Catalog product model.
"""
from sqlalchemy import Boolean, Column, Float, Integer, JSON, String, Text

from ..database import Base


class CatalogProduct(Base):
    """A purchasable product row; list-valued attributes are stored as JSON"""
    __tablename__ = "catalog_products"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False, index=True)  # top | bottom | shoes
    price = Column(Float, nullable=False, default=0.0, index=True)
    brand = Column(String(100), nullable=True)
    colour = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    product_url = Column(Text, nullable=True)
    images = Column(JSON, nullable=True)
    occasions = Column(JSON, nullable=True)
    style_tags = Column(JSON, nullable=True)
    style_categories = Column(JSON, nullable=True)
    body_fits = Column(JSON, nullable=True)
    fabric_characteristics = Column(JSON, nullable=True)
    formality_level = Column(Integer, nullable=True)
    availability = Column(Boolean, nullable=True, default=True)

    def to_dict(self):
        """Raw catalog row, in the shape reco.normalize accepts"""
        return {
            "id": self.id,
            "product_name": self.product_name,
            "category": self.category,
            "price": self.price,
            "brand": self.brand,
            "colour": self.colour,
            "description": self.description,
            "product_url": self.product_url,
            "images": self.images,
            "occasions": self.occasions,
            "style_tags": self.style_tags,
            "style_categories": self.style_categories,
            "body_fits": self.body_fits,
            "fabric_characteristics": self.fabric_characteristics,
            "formality_level": self.formality_level,
            "availability": self.availability,
        }
