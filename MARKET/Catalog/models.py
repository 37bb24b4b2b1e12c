# Catalog/models.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Literal

from MARKET.utils.pricing import validate_discount_fields
from MARKET.utils.sanitize import SanitizedModel


class CamelModel(BaseModel):
    # Request bodies use camelCase on the wire; snake_case names are accepted too.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class DiscountFields(CamelModel):
    discount_type: Optional[Literal["percentage", "amount"]] = Field(None, alias="discountType")
    discount_value: Optional[float] = Field(None, alias="discountValue")
    in_stock: Optional[bool] = Field(None, alias="inStock")

    @model_validator(mode="after")
    def check_discount(self):
        validate_discount_fields(self.discount_type, self.discount_value)
        return self


class ListingUpsert(DiscountFields):
    product: str = Field(..., min_length=1)


class ListingUpdate(DiscountFields):
    pass


class RationPackRequest(CamelModel):
    products: List[str] = Field(default_factory=list)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    radius: Optional[float] = 1
    sort_by: str = Field("cheapest", alias="sortBy")


class LocationUpdate(SanitizedModel):
    model_config = ConfigDict(extra="forbid")

    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=300)


class PushTokenInput(SanitizedModel):
    model_config = ConfigDict(extra="forbid")

    token: str = Field(..., min_length=1, max_length=4096)


class PushMessage(SanitizedModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=100)
    body: str = Field(..., min_length=1, max_length=500)
    data: dict = Field(default_factory=dict)


class ReviewScores(SanitizedModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    product_quality: Optional[int] = Field(None, ge=1, le=5, alias="productQuality")
    delivery_experience: Optional[int] = Field(None, ge=1, le=5, alias="deliveryExperience")
    value_for_money: Optional[int] = Field(None, ge=1, le=5, alias="valueForMoney")


class ReviewInput(ReviewScores):
    vendor_product_id: str = Field(..., min_length=1, alias="vendorProductId")
    order_id: Optional[str] = Field(None, alias="orderId")
    rating: int = Field(..., ge=1, le=5)
    review: str = Field(..., min_length=1, max_length=1000)


class ReviewUpdate(ReviewScores):
    rating: Optional[int] = Field(None, ge=1, le=5)
    review: Optional[str] = Field(None, min_length=1, max_length=1000)
