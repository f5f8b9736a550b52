"""Pydantic request/response schemas for the storefront API.

These are the external contracts, kept separate from the internal
aggregates and commands.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from storefront.campaign.campaign import CampaignStatus
from storefront.cart.pricing import FulfillmentMode
from storefront.fulfillment.phases import PickupPhase
from storefront.order.status import OrderStatus, PaymentMethod


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class TotalsSchema(BaseModel):
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


class AddressSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    line1: str
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str
    phone: str = ""


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str
    price: Decimal = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    category: str = ""
    rating: float = Field(ge=0, le=5, default=0.0)
    description: str = ""
    image: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Noise-cancelling Headphones",
                    "price": "4999.00",
                    "stock": 25,
                    "category": "Audio",
                    "rating": 4.5,
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = None
    price: Decimal | None = Field(ge=0, default=None)
    stock: int | None = Field(ge=0, default=None)
    category: str | None = None
    rating: float | None = Field(ge=0, le=5, default=None)
    description: str | None = None
    image: str | None = None


class AdjustStockRequest(BaseModel):
    delta: int


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: Decimal
    stock: int
    category: str
    rating: float
    description: str
    image: str | None = None


# ---------------------------------------------------------------------------
# Sessions and carts
# ---------------------------------------------------------------------------
class OpenSessionRequest(BaseModel):
    session_id: str | None = None


class LoginRequest(BaseModel):
    email: str


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(default=1)


class SetQuantityRequest(BaseModel):
    quantity: int


class AttributeCampaignRequest(BaseModel):
    campaign_id: str


class CartItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    name: str
    price: Decimal
    quantity: int


class SessionUserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class SessionResponse(BaseModel):
    session_id: str
    user: SessionUserSchema | None = None
    items: list[CartItemSchema]
    loyalty_balance: int
    campaign_id: str | None = None


class CheckoutRequest(BaseModel):
    fulfillment_mode: FulfillmentMode
    payment_method: PaymentMethod = PaymentMethod.CARD
    shipping_address: AddressSchema | None = None
    store_id: int | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "fulfillment_mode": "ship",
                    "payment_method": "upi",
                    "shipping_address": {
                        "name": "Asha Rao",
                        "line1": "221 Linking Road",
                        "city": "Mumbai",
                        "state": "MH",
                        "postal_code": "400050",
                    },
                },
                {"fulfillment_mode": "pickup", "payment_method": "cod", "store_id": 2},
            ]
        }
    }


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    name: str
    price: Decimal
    quantity: int


class PickupStoreSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    items: list[OrderItemSchema]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    status: OrderStatus
    tracking_status: str
    fulfillment_mode: FulfillmentMode
    pickup_phase: PickupPhase | None = None
    shipping_address: AddressSchema | None = None
    pickup_store: PickupStoreSchema | None = None
    payment_method: PaymentMethod
    campaign_id: str | None = None
    created_at: datetime
    updated_at: datetime


class UpdateStatusRequest(BaseModel):
    status: str
    tracking_status: str | None = None
    award_points: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"status": "shipped", "tracking_status": "In Transit"},
                {"status": "delivered", "tracking_status": "Delivered", "award_points": True},
                {"status": "packed"},
            ]
        }
    }


class TrackingOptionsResponse(BaseModel):
    finalized: bool
    options: dict[str, list[str]]


class LoyaltyAwardResponse(BaseModel):
    order_id: str
    points_awarded: int


class DashboardResponse(BaseModel):
    order_count: int
    orders_by_status: dict[str, int]
    revenue: Decimal
    low_stock: list[ProductResponse]


# ---------------------------------------------------------------------------
# Customers and loyalty
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    name: str
    email: str
    mobile: str = ""


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    mobile: str
    loyalty_points: int


class LoyaltyEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: str
    points: int
    awarded_at: datetime


class LoyaltyResponse(BaseModel):
    customer_id: str
    balance: int
    entries: list[LoyaltyEntrySchema]


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------
class CreateCampaignRequest(BaseModel):
    name: str
    target_audience: str = ""
    budget: Decimal = Field(ge=0)
    start_date: date
    end_date: date


class CampaignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    target_audience: str
    budget: Decimal
    start_date: date
    end_date: date
    active: bool
    status: CampaignStatus


class CampaignROIResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    campaign_id: str
    budget: Decimal
    revenue: Decimal
    roi: Decimal
    order_count: int
