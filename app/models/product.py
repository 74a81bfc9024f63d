# app/models/product.py
from sqlmodel import SQLModel, Field


class CatalogItem(SQLModel):
    """
    Product catalog entry, one line of products.txt:

        category|name|description|price
    """

    category: str = Field(description="Menu category, e.g. 'Classic Waffles'")
    name: str = Field(description="Display name of the flavor/product")
    description: str = ""
    price: float = Field(ge=0, description="Unit price")
