from pydantic import BaseModel, field_validator
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Text, func, CheckConstraint, Index

from enums.special_status import SpecialStatus
from models.base import Base, enum_column
from utils.selection import decode_selection


class Special(Base):
    __tablename__ = 'specials'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    # Authored bundle price, never derived from the items
    price = Column(Float, nullable=False)
    status = Column(enum_column(SpecialStatus), nullable=False, default=SpecialStatus.DRAFT)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_special_price_non_negative'),
    )


class SpecialItem(Base):
    __tablename__ = 'special_items'

    id = Column(Integer, primary_key=True)
    special_id = Column(Integer, ForeignKey('specials.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    # JSON-encoded selection (parameter_group_id -> parameter_id), see utils/selection.py
    selected_parameters = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_special_item_quantity_positive'),
        Index('ix_special_items_special_id', 'special_id'),
    )


class SpecialItemDTO(BaseModel):
    id: int | None = None
    special_id: int | None = None
    product_id: int
    quantity: int = 1
    selected_parameters: dict[int, int] = {}

    @field_validator('selected_parameters', mode='before')
    @classmethod
    def decode_selected_parameters(cls, value):
        return decode_selection(value)


class SpecialDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    description: str | None = None
    price: float = 0.0
    status: SpecialStatus = SpecialStatus.DRAFT
    items: list[SpecialItemDTO] = []


class SpecialAvailabilityDTO(BaseModel):
    special_id: int
    is_available: bool
    reasons: list[str] = []


class SpecialPricingDTO(BaseModel):
    """Display pricing of a special: authored bundle price vs itemized original price."""
    special_id: int
    name: str | None = None
    price: float
    original_price: float | None = None
    discount_percent: int | None = None
    is_available: bool = True
    reasons: list[str] = []
