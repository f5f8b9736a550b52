"""Serializable session state mirrored into the local cache."""

from pydantic import BaseModel, Field

from storefront.cart.cart import Cart


class SessionUser(BaseModel):
    id: str
    name: str
    email: str


class SessionState(BaseModel):
    session_id: str
    user: SessionUser | None = None
    cart: Cart = Field(default_factory=Cart)
    loyalty_balance: int = Field(default=0, ge=0)
    campaign_id: str | None = None
