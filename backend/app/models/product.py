from sqlalchemy import Column, Integer, String, Float
from app.core.database import Base


class Product(Base):
    """
    Catalog entry shown on the product page.

    Products are loaded out of band (see seed_products.py); the API only reads them.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    old_price = Column(Float, nullable=True)
    price = Column(Float, nullable=False)
    platform = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
