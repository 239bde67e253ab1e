"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. The storefront speaks camelCase; snake_case field
names are accepted too.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartItemSchema(CamelModel):
    product_id: str | None = None
    quantity: int = Field(ge=1)
    is_combo: bool = False
    combo_id: str | None = None


class PricingSummarySchema(CamelModel):
    original_total: float
    final_total: float
    total_savings: float | None = None


class OptimalPricingSchema(CamelModel):
    summary: PricingSummarySchema
    combos: list[dict] = Field(default_factory=list)
    breakdown: list[dict] = Field(default_factory=list)


class OrderLineSchema(CamelModel):
    product_id: str
    product_name: str
    unit_price: int
    list_price: int
    quantity: int
    from_combo: bool = False
    combo_id: str | None = None
    combo_name: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class QuoteRequest(CamelModel):
    items: list[CartItemSchema] = Field(min_length=1)


class PlaceOrderRequest(CamelModel):
    student_id: str
    full_name: str
    email: str
    phone_number: str
    school: str
    additional_note: str | None = None
    items: list[CartItemSchema] = Field(min_length=1)
    use_optimal_pricing: bool = False
    optimal_pricing: OptimalPricingSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "studentId": "SE170001",
                    "fullName": "Nguyen Van A",
                    "email": "a.nguyen@example.edu",
                    "phoneNumber": "0901234567",
                    "school": "Software Engineering",
                    "items": [
                        {"productId": "tshirt", "quantity": 1},
                        {"productId": "cap", "quantity": 1},
                    ],
                }
            ]
        },
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class QuoteResponse(CamelModel):
    mode: str
    lines: list[OrderLineSchema]
    total_amount: int
    original_total: int
    discount_total: int
    combo_info: dict | None = None


class PlaceOrderResponse(CamelModel):
    order_code: str
    total_amount: int
    status: str
    created_at: str
    combo_info: dict | None = None
    lines: list[OrderLineSchema]


class OrderItemSummarySchema(CamelModel):
    product_name: str
    quantity: int
    price: int


class OrderSummaryResponse(CamelModel):
    order_code: str
    student_id: str
    full_name: str
    status: str
    total_amount: int
    created_at: str | None = None
    status_updated_at: str | None = None
    combo_info: dict | None = None
    items: list[OrderItemSummarySchema]
