from typing import Optional

from pydantic import BaseModel, Field


class ProductPayload(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(allow_inf_nan=False)
    in_stock: int
    category: Optional[str] = None
