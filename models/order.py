from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, func, CheckConstraint, Text, Index

from enums.order_status import OrderStatus
from models.base import Base, enum_column
from models.orderItem import OrderLineItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, unique=True)
    # Origin cart. Unique: a cart is converted at most once.
    cart_id = Column(Integer, ForeignKey('carts.id', ondelete='SET NULL'), nullable=True, unique=True)
    user_id = Column(Integer, nullable=True)
    status = Column(enum_column(OrderStatus), nullable=False, default=OrderStatus.PENDING)

    # Customer contact snapshot
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    secondary_phone = Column(String, nullable=True)
    address = Column(Text, nullable=False)

    # Derived from the line items, recomputed on every line item mutation
    total_price = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('total_price >= 0', name='check_order_total_price_non_negative'),
        Index('ix_orders_user_id', 'user_id'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    cart_id: int | None = None
    user_id: int | None = None
    status: OrderStatus | None = None
    name: str | None = None
    phone: str | None = None
    secondary_phone: str | None = None
    address: str | None = None
    total_price: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderLineItemDTO] = []


class CreateOrderRequest(BaseModel):
    cart_id: int
    user_id: int | None = None
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    secondary_phone: str | None = None

    @field_validator('name', 'phone', 'address', mode='before')
    @classmethod
    def strip_required(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('secondary_phone', mode='before')
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class UpdateOrderDetailsRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    address: str | None = Field(default=None, min_length=1)
    secondary_phone: str | None = None

    @field_validator('name', 'phone', 'address', mode='before')
    @classmethod
    def reject_null_required(cls, value):
        if value is None:
            raise ValueError("field cannot be cleared")
        return value.strip() if isinstance(value, str) else value

    def changed_fields(self) -> dict:
        return self.model_dump(exclude_unset=True)
