from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Text, func, Index

from models.base import Base


class ParameterGroup(Base):
    __tablename__ = 'parameter_groups'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())


class Parameter(Base):
    __tablename__ = 'parameters'

    id = Column(Integer, primary_key=True)
    parameter_group_id = Column(Integer, ForeignKey('parameter_groups.id', ondelete='CASCADE'), nullable=False)
    name = Column(String, nullable=False)
    # Signed delta added to the product base price when this parameter is selected
    price_modifier = Column(Float, nullable=False, default=0.0)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index('ix_parameters_group_id', 'parameter_group_id'),
    )


class ParameterGroupDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    description: str | None = None
    created_at: datetime | None = None


class ParameterDTO(BaseModel):
    id: int
    parameter_group_id: int
    name: str | None = None
    price_modifier: float = 0.0
    display_order: int = 0
