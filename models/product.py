from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, Text, func, UniqueConstraint

from models.base import Base
from models.parameter import ParameterDTO


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey('categories.id'), nullable=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Float, nullable=False, default=0.0)
    # Products are soft-disabled, never deleted while carts or orders reference them
    is_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class ProductParameterGroup(Base):
    """Attachment of a parameter group to a product, with an optional default parameter."""
    __tablename__ = 'product_parameter_groups'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='CASCADE'), nullable=False)
    parameter_group_id = Column(Integer, ForeignKey('parameter_groups.id', ondelete='CASCADE'), nullable=False)
    default_parameter_id = Column(Integer, ForeignKey('parameters.id', ondelete='SET NULL'), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('product_id', 'parameter_group_id', name='uq_product_parameter_group'),
    )


class ProductParameterGroupDTO(BaseModel):
    parameter_group_id: int
    name: str | None = None
    default_parameter_id: int | None = None
    display_order: int = 0
    parameters: list[ParameterDTO] = []

    def get_parameter(self, parameter_id: int) -> ParameterDTO | None:
        for parameter in self.parameters:
            if parameter.id == parameter_id:
                return parameter
        return None


class ProductDTO(BaseModel):
    """
    Product snapshot with its attached parameter groups and their parameters.

    This is the input of the pricing resolver; it is assembled by
    ProductRepository.get_by_ids_with_parameters() in a fixed number of queries.
    """
    id: int
    category_id: int | None = None
    name: str | None = None
    base_price: float = 0.0
    is_enabled: bool = True
    parameter_groups: list[ProductParameterGroupDTO] = []

    def get_parameter_group(self, parameter_group_id: int) -> ProductParameterGroupDTO | None:
        for group in self.parameter_groups:
            if group.parameter_group_id == parameter_group_id:
                return group
        return None
