from pydantic import BaseModel, Field, PositiveInt, field_validator
from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, Text, Float, DateTime, func, UniqueConstraint, Index

from models.base import Base
from models.cart import CartDTO
from utils.selection import decode_selection


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete='CASCADE'), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    special_id = Column(Integer, ForeignKey("specials.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    # Complete JSON-encoded selection (parameter_group_id -> parameter_id), canonical
    # form from utils/selection.py so equal selections compare equal in SQL
    selected_parameters = Column(Text, nullable=True)
    # Unit price snapshot taken at add-time. Authoritative for cart display,
    # re-validated at checkout.
    unit_price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
        CheckConstraint('(product_id IS NULL) <> (special_id IS NULL)', name='check_cart_item_product_xor_special'),
        UniqueConstraint('cart_id', 'product_id', 'selected_parameters', name='uq_cart_item_product_selection'),
        UniqueConstraint('cart_id', 'special_id', name='uq_cart_item_special'),
        Index('ix_cart_items_cart_id', 'cart_id'),
    )


class CartItemDTO(BaseModel):
    id: int | None = None
    cart_id: int | None = None
    product_id: int | None = None
    special_id: int | None = None
    quantity: int | None = None
    selected_parameters: dict[int, int] = {}
    unit_price: float | None = None

    @field_validator('selected_parameters', mode='before')
    @classmethod
    def decode_selected_parameters(cls, value):
        return decode_selection(value)

    @property
    def line_total(self) -> float:
        return round((self.unit_price or 0.0) * (self.quantity or 0), 2)


class AddProductToCartRequest(BaseModel):
    user_id: int | None = None
    guest_session_id: str | None = None
    product_id: int
    quantity: PositiveInt = 1
    # Groups left out fall back to the attachment default
    selected_parameters: dict[int, int] = Field(default_factory=dict)


class AddSpecialToCartRequest(BaseModel):
    user_id: int | None = None
    guest_session_id: str | None = None
    special_id: int
    quantity: PositiveInt = 1


class UpdateCartItemRequest(BaseModel):
    cart_item_id: int
    quantity: PositiveInt


class CartViewDTO(BaseModel):
    cart: CartDTO
    items: list[CartItemDTO] = []
    total: float = 0.0
