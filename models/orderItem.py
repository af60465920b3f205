from datetime import datetime

from pydantic import BaseModel, Field, NonNegativeFloat, PositiveInt, field_validator, model_validator
from sqlalchemy import Column, Integer, DateTime, Float, func, ForeignKey, CheckConstraint, Index, String, Text

from models.base import Base
from utils.selection import decode_selection


class OrderLineItem(Base):
    __tablename__ = 'order_line_items'

    # Line items are snapshots: product name, price and selection are copied at
    # creation time and never joined back to the live catalogue.
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_line_item_quantity_positive'),
        CheckConstraint('unit_price >= 0', name='ck_order_line_item_price_non_negative'),
        CheckConstraint('product_id IS NULL OR special_id IS NULL', name='ck_order_line_item_single_source'),
        Index('ix_order_line_items_order_id', 'order_id'),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='SET NULL'), nullable=True)
    special_id = Column(Integer, ForeignKey('specials.id', ondelete='SET NULL'), nullable=True)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    selected_parameters = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class OrderLineItemDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    product_id: int | None = None
    special_id: int | None = None
    product_name: str | None = None
    quantity: int | None = None
    unit_price: float | None = None
    selected_parameters: dict[int, int] = {}
    created_at: datetime | None = None

    @field_validator('selected_parameters', mode='before')
    @classmethod
    def decode_selected_parameters(cls, value):
        return decode_selection(value)

    @property
    def line_total(self) -> float:
        return round((self.unit_price or 0.0) * (self.quantity or 0), 2)


class OrderLineItemRequest(BaseModel):
    """Admin-supplied line item. The caller provides the full snapshot."""
    product_id: int | None = None
    special_id: int | None = None
    product_name: str = Field(min_length=1)
    quantity: PositiveInt
    unit_price: NonNegativeFloat
    selected_parameters: dict[int, int] = Field(default_factory=dict)

    @model_validator(mode='after')
    def check_single_source(self):
        if self.product_id is None and self.special_id is None:
            raise ValueError("product_id or special_id is required")
        if self.product_id is not None and self.special_id is not None:
            raise ValueError("product_id and special_id are mutually exclusive")
        return self
