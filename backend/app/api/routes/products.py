import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.models.product import Product

logger = logging.getLogger(__name__)

# Served under /auth because the product page already calls it there
router = APIRouter(prefix="/auth", tags=["products"])


class ProductResponse(BaseModel):
    id: int = Field(alias="productId")
    name: str = Field(alias="productName")
    old_price: Optional[float] = Field(default=None, alias="oldPrice")
    price: float
    platform: Optional[str] = Field(default=None, alias="plataform")
    image_url: Optional[str] = Field(default=None, alias="imagemUrl")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


@router.get("/product/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: Session = Depends(get_db)):
    """Get a single product by ID"""
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
    except Exception:
        logger.exception("Error fetching product %s", product_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching product"
        )

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return product
