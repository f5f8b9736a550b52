"""FastAPI routes for the storefront: products, sessions, orders, customers, campaigns."""

from fastapi import APIRouter, Depends, Request

from storefront.api.schemas import (
    AddToCartRequest,
    AdjustStockRequest,
    AttributeCampaignRequest,
    CampaignResponse,
    CampaignROIResponse,
    CheckoutRequest,
    CreateCampaignRequest,
    CreateProductRequest,
    CustomerResponse,
    DashboardResponse,
    LoginRequest,
    LoyaltyAwardResponse,
    LoyaltyResponse,
    OpenSessionRequest,
    OrderResponse,
    ProductResponse,
    RegisterCustomerRequest,
    SessionResponse,
    SetQuantityRequest,
    StatusResponse,
    TotalsSchema,
    TrackingOptionsResponse,
    UpdateProductRequest,
    UpdateStatusRequest,
)
from storefront.campaign.attribution import DeactivateCampaign, LaunchCampaign
from storefront.cart.pricing import FulfillmentMode
from storefront.container import Storefront
from storefront.fulfillment.status_update import UpdateOrderStatus
from storefront.loyalty.directory import RegisterCustomer
from storefront.loyalty.awarding import AwardLoyaltyPoints
from storefront.order.placement import PlaceOrder
from storefront.order.status import OrderStatus
from storefront.session.session import Session


def get_storefront(request: Request) -> Storefront:
    return request.app.state.storefront


def _session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        user=session.user,
        items=session.cart.items,
        loyalty_balance=session.loyalty_balance,
        campaign_id=session.campaign_id,
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products(category: str | None = None, sf: Storefront = Depends(get_storefront)):
    products = sf.catalogue.by_category(category) if category else sf.catalogue.refresh()
    return [ProductResponse.model_validate(product) for product in products]


@product_router.get("/low-stock", response_model=list[ProductResponse])
async def low_stock_products(threshold: int = 10, sf: Storefront = Depends(get_storefront)):
    sf.catalogue.refresh()
    return [ProductResponse.model_validate(product) for product in sf.catalogue.low_stock(threshold)]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, sf: Storefront = Depends(get_storefront)):
    return ProductResponse.model_validate(sf.catalogue.fresh(product_id))


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(body: CreateProductRequest, sf: Storefront = Depends(get_storefront)):
    return ProductResponse.model_validate(sf.catalogue.add_product(**body.model_dump()))


@product_router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, body: UpdateProductRequest, sf: Storefront = Depends(get_storefront)):
    changes = body.model_dump(exclude_unset=True)
    return ProductResponse.model_validate(sf.catalogue.update_product(product_id, **changes))


@product_router.post("/{product_id}/stock", response_model=ProductResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest, sf: Storefront = Depends(get_storefront)):
    return ProductResponse.model_validate(sf.catalogue.adjust_stock(product_id, body.delta))


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, sf: Storefront = Depends(get_storefront)) -> StatusResponse:
    sf.catalogue.delete_product(product_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Session Router (identity, cart, attribution, checkout)
# ---------------------------------------------------------------------------
session_router = APIRouter(prefix="/sessions", tags=["sessions"])


@session_router.post("", status_code=201, response_model=SessionResponse)
async def open_session(body: OpenSessionRequest, sf: Storefront = Depends(get_storefront)):
    return _session_response(sf.sessions.open(body.session_id))


@session_router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, sf: Storefront = Depends(get_storefront)):
    return _session_response(sf.sessions.get(session_id))


@session_router.post("/{session_id}/login", response_model=SessionResponse)
async def login(session_id: str, body: LoginRequest, sf: Storefront = Depends(get_storefront)):
    return _session_response(sf.login(session_id, body.email))


@session_router.post("/{session_id}/logout", response_model=SessionResponse)
async def logout(session_id: str, sf: Storefront = Depends(get_storefront)):
    session = sf.sessions.get(session_id)
    session.logout()
    return _session_response(session)


@session_router.post("/{session_id}/cart/items", response_model=SessionResponse)
async def add_cart_item(session_id: str, body: AddToCartRequest, sf: Storefront = Depends(get_storefront)):
    return _session_response(sf.add_to_cart(session_id, body.product_id, body.quantity))


@session_router.put("/{session_id}/cart/items/{product_id}", response_model=SessionResponse)
async def set_cart_quantity(
    session_id: str, product_id: str, body: SetQuantityRequest, sf: Storefront = Depends(get_storefront)
):
    return _session_response(sf.set_quantity(session_id, product_id, body.quantity))


@session_router.delete("/{session_id}/cart/items/{product_id}", response_model=SessionResponse)
async def remove_cart_item(session_id: str, product_id: str, sf: Storefront = Depends(get_storefront)):
    session = sf.sessions.get(session_id)
    session.remove_from_cart(product_id)
    return _session_response(session)


@session_router.delete("/{session_id}/cart", response_model=SessionResponse)
async def clear_cart(session_id: str, sf: Storefront = Depends(get_storefront)):
    session = sf.sessions.get(session_id)
    session.clear_cart()
    return _session_response(session)


@session_router.get("/{session_id}/cart/totals", response_model=TotalsSchema)
async def cart_totals(
    session_id: str, mode: FulfillmentMode = FulfillmentMode.SHIP, sf: Storefront = Depends(get_storefront)
):
    return TotalsSchema(**sf.sessions.get(session_id).totals(mode).as_dict())


@session_router.post("/{session_id}/campaign", response_model=SessionResponse)
async def attribute_campaign(
    session_id: str, body: AttributeCampaignRequest, sf: Storefront = Depends(get_storefront)
):
    session = sf.sessions.get(session_id)
    session.attribute_campaign(body.campaign_id)
    return _session_response(session)


@session_router.post("/{session_id}/checkout", status_code=201, response_model=OrderResponse)
async def checkout(session_id: str, body: CheckoutRequest, sf: Storefront = Depends(get_storefront)):
    command = PlaceOrder(
        session_id=session_id,
        fulfillment_mode=body.fulfillment_mode.value,
        payment_method=body.payment_method.value,
        shipping_address=body.shipping_address.model_dump() if body.shipping_address else None,
        store_id=body.store_id,
    )
    return OrderResponse.model_validate(sf.process(command))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(
    user_id: str | None = None, status: OrderStatus | None = None, sf: Storefront = Depends(get_storefront)
):
    orders = sf.orders.history(user_id, status.value if status else None)
    return [OrderResponse.model_validate(order) for order in orders]


@order_router.get("/stats", response_model=DashboardResponse)
async def order_stats(low_stock_threshold: int = 10, sf: Storefront = Depends(get_storefront)):
    stats = sf.dashboard(low_stock_threshold)
    return DashboardResponse(
        order_count=stats.order_count,
        orders_by_status=stats.orders_by_status,
        revenue=stats.revenue,
        low_stock=[ProductResponse.model_validate(product) for product in stats.low_stock],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, sf: Storefront = Depends(get_storefront)):
    return OrderResponse.model_validate(sf.orders.get(order_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateStatusRequest, sf: Storefront = Depends(get_storefront)):
    command = UpdateOrderStatus(
        order_id=order_id,
        requested=body.status,
        tracking_label=body.tracking_status,
        award_points=body.award_points,
    )
    return OrderResponse.model_validate(sf.process(command))


@order_router.get("/{order_id}/tracking-options", response_model=TrackingOptionsResponse)
async def order_tracking_options(order_id: str, sf: Storefront = Depends(get_storefront)):
    options = sf.tracking_options(order_id)
    return TrackingOptionsResponse(finalized=not options, options=options)


@order_router.post("/{order_id}/loyalty-award", response_model=LoyaltyAwardResponse)
async def award_loyalty_points(order_id: str, sf: Storefront = Depends(get_storefront)):
    points = sf.process(AwardLoyaltyPoints(order_id=order_id))
    return LoyaltyAwardResponse(order_id=order_id, points_awarded=points)


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=CustomerResponse)
async def register_customer(body: RegisterCustomerRequest, sf: Storefront = Depends(get_storefront)):
    customer = sf.process(RegisterCustomer(name=body.name, email=body.email, mobile=body.mobile))
    return CustomerResponse.model_validate(customer)


@customer_router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str, sf: Storefront = Depends(get_storefront)):
    return CustomerResponse.model_validate(sf.customers.get(customer_id))


@customer_router.get("/{customer_id}/loyalty", response_model=LoyaltyResponse)
async def get_loyalty(customer_id: str, sf: Storefront = Depends(get_storefront)):
    customer = sf.customers.get(customer_id)
    return LoyaltyResponse(
        customer_id=customer.id,
        balance=customer.loyalty_points,
        entries=customer.loyalty_entries,
    )


@customer_router.post("/{customer_id}/loyalty/reset", response_model=LoyaltyResponse)
async def reset_loyalty(customer_id: str, sf: Storefront = Depends(get_storefront)):
    customer = sf.loyalty.reset(customer_id)
    return LoyaltyResponse(
        customer_id=customer.id,
        balance=customer.loyalty_points,
        entries=customer.loyalty_entries,
    )


# ---------------------------------------------------------------------------
# Campaign Router
# ---------------------------------------------------------------------------
campaign_router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@campaign_router.post("", status_code=201, response_model=CampaignResponse)
async def launch_campaign(body: CreateCampaignRequest, sf: Storefront = Depends(get_storefront)):
    campaign = sf.process(LaunchCampaign(**body.model_dump()))
    return CampaignResponse.model_validate(campaign)


@campaign_router.get("", response_model=list[CampaignResponse])
async def list_campaigns(include_completed: bool = False, sf: Storefront = Depends(get_storefront)):
    return [CampaignResponse.model_validate(c) for c in sf.campaigns.list(include_completed=include_completed)]


@campaign_router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(campaign_id: str, sf: Storefront = Depends(get_storefront)):
    return CampaignResponse.model_validate(sf.campaigns.get(campaign_id))


@campaign_router.delete("/{campaign_id}", response_model=StatusResponse)
async def deactivate_campaign(campaign_id: str, sf: Storefront = Depends(get_storefront)) -> StatusResponse:
    sf.process(DeactivateCampaign(campaign_id=campaign_id))
    return StatusResponse()


@campaign_router.get("/{campaign_id}/roi", response_model=CampaignROIResponse)
async def campaign_roi(campaign_id: str, sf: Storefront = Depends(get_storefront)):
    return CampaignROIResponse.model_validate(sf.campaigns.roi(campaign_id))
