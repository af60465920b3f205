"""
Custom exceptions for the storefront engine.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── NotFoundException
│   ├── ProductNotFoundException
│   ├── ParameterNotFoundException
│   ├── SpecialNotFoundException
│   ├── CartNotFoundException
│   ├── CartItemNotFoundException
│   └── OrderNotFoundException
├── ValidationException
│   ├── ProductUnavailableException
│   ├── SpecialUnavailableException
│   └── EmptyCartException
├── UnauthorizedException
├── StorageException
├── PricingException
│   ├── IncompleteSelectionException
│   └── InvalidParameterException
├── CartException
│   ├── InvalidIdentityException
│   └── MergeFailedException
└── OrderException
    ├── InvalidTransitionException
    ├── OrderLockedException
    └── DuplicateOrderException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

The presentation layer catches and maps them:
    try:
        await OrderService.update_order_status(order_id, status, admin_id, session)
    except InvalidTransitionException as e:
        return error_response(409, str(e))
"""

from .base import StorefrontException
from .common import NotFoundException, ValidationException, UnauthorizedException, StorageException
from .pricing import PricingException, IncompleteSelectionException, InvalidParameterException
from .product import ProductNotFoundException, ProductUnavailableException, ParameterNotFoundException
from .special import SpecialNotFoundException, SpecialUnavailableException
from .cart import (
    CartException,
    InvalidIdentityException,
    MergeFailedException,
    CartNotFoundException,
    CartItemNotFoundException,
    EmptyCartException
)
from .order import (
    OrderException,
    OrderNotFoundException,
    InvalidTransitionException,
    OrderLockedException,
    DuplicateOrderException
)

__all__ = [
    # Base
    'StorefrontException',

    # Common
    'NotFoundException',
    'ValidationException',
    'UnauthorizedException',
    'StorageException',

    # Pricing
    'PricingException',
    'IncompleteSelectionException',
    'InvalidParameterException',

    # Product
    'ProductNotFoundException',
    'ProductUnavailableException',
    'ParameterNotFoundException',

    # Special
    'SpecialNotFoundException',
    'SpecialUnavailableException',

    # Cart
    'CartException',
    'InvalidIdentityException',
    'MergeFailedException',
    'CartNotFoundException',
    'CartItemNotFoundException',
    'EmptyCartException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidTransitionException',
    'OrderLockedException',
    'DuplicateOrderException',
]
