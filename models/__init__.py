"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for foreign keys to resolve correctly.
"""

from models.base import Base
from models.category import Category
from models.parameter import ParameterGroup, Parameter
from models.product import Product, ProductParameterGroup
from models.special import Special, SpecialItem
from models.cart import Cart
from models.cartItem import CartItem
from models.order import Order
from models.orderItem import OrderLineItem
from models.history import HistoryEntry

__all__ = [
    'Base',
    'Category',
    'ParameterGroup',
    'Parameter',
    'Product',
    'ProductParameterGroup',
    'Special',
    'SpecialItem',
    'Cart',
    'CartItem',
    'Order',
    'OrderLineItem',
    'HistoryEntry',
]
