from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

OrderStatus = Literal["completed", "pending", "cancelled"]


class OrderLine(BaseModel):
    # product id is a foreign key, so only whole numbers are accepted
    id: int
    quantity: int = Field(ge=0)
    price: float = Field(allow_inf_nan=False)


class OrderPayload(BaseModel):
    """
    Body of ``POST /orders``.

    Numeric fields accept numbers or numeric strings. The id fields
    (``customerId``, ``paymentMethodId``, line ``id``) must be whole numbers;
    ``1.5`` is a validation error, not a store error. ``created_at`` is an
    ISO 8601 string stored as naive UTC; an empty string counts as absent.
    """

    model_config = ConfigDict(populate_by_name=True)

    customer_id: int = Field(alias="customerId")
    payment_method_id: Optional[int] = Field(default=None, alias="paymentMethodId")
    total: float = Field(allow_inf_nan=False)
    status: Optional[OrderStatus] = None
    created_at: Optional[datetime] = None
    products: List[OrderLine] = Field(default_factory=list)

    @field_validator("created_at", mode="before")
    @classmethod
    def _iso_timestamp(cls, value):
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError("must be an ISO 8601 timestamp string")
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise ValueError("must be an ISO 8601 timestamp string") from None
        if parsed.tzinfo is not None:
            # store-assigned defaults are naive UTC
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
