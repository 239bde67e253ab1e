"""FastAPI routes for the Ordering domain.

Protean's ValidationError and ObjectNotFoundError propagate to the exception
handlers registered on the app (400 and 404). Allocation and storage failures
are server-side and become 500s here.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Request

from ordering.api.schemas import (
    OrderSummaryResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    QuoteRequest,
    QuoteResponse,
)
from ordering.errors import AllocationExhausted, PersistenceError
from ordering.order.assembly import OrderSubmission
from ordering.order.tracking import get_order_summary
from ordering.pricing.model import CartItem
from ordering.services import OrderingServices

order_router = APIRouter(prefix="/orders", tags=["orders"])


def get_services(request: Request) -> OrderingServices:
    return request.app.state.ordering_services


@order_router.post("", status_code=201, response_model=PlaceOrderResponse, response_model_exclude_none=True)
async def place_order(body: PlaceOrderRequest, services: OrderingServices = Depends(get_services)):
    optimal_pricing = body.optimal_pricing.model_dump(by_alias=True, exclude_none=True) if body.optimal_pricing else None
    submission = OrderSubmission(
        student_id=body.student_id,
        full_name=body.full_name,
        email=body.email,
        phone_number=body.phone_number,
        school=body.school,
        additional_note=body.additional_note,
        items=json.dumps([item.model_dump(by_alias=True) for item in body.items]),
        use_optimal_pricing=body.use_optimal_pricing,
        optimal_pricing=json.dumps(optimal_pricing) if optimal_pricing else None,
    )
    try:
        result = services.assembler.place(submission)
    except AllocationExhausted as exc:
        raise HTTPException(status_code=500, detail="Could not allocate an order code, please retry") from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail="The order could not be saved, please retry") from exc
    return PlaceOrderResponse.model_validate(result)


@order_router.post("/quote", response_model=QuoteResponse)
async def quote_order(body: QuoteRequest, services: OrderingServices = Depends(get_services)):
    """Price a cart without placing an order."""
    cart_items = [CartItem.from_payload(item.model_dump(by_alias=True)) for item in body.items]
    pricing = services.optimizer.price_cart(cart_items)
    return QuoteResponse.model_validate(pricing.to_dict())


@order_router.get("/{order_code}", response_model=OrderSummaryResponse)
async def get_order(order_code: str, services: OrderingServices = Depends(get_services)):
    summary = get_order_summary(services.store, order_code)
    return OrderSummaryResponse.model_validate(summary)
