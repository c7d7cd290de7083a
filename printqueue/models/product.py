from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class ProductBase(SQLModel):
    # Katalogdaten werden vom Shop gepflegt, hier nur gelesen
    name: str
    slug: Optional[str] = None
    weight: float = 0  # Gramm pro Stück
    price: Optional[float] = None
    stl_link: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Product(ProductBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
