from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """A user account as stored in the ``users`` collection."""

    username: str
    email: str
    is_admin: bool = False
    created_at: datetime = Field(default_factory=datetime.now)


class Product(BaseModel):
    sku: str  # Stock keeping unit, e.g. "SKU-001"
    name: str
    price: float = Field(..., ge=0)  # Unit price in USD
    tags: list[str] = []
    description: Optional[str] = None
