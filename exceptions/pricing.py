"""
Pricing-related exceptions.

Raised by the parameter pricing resolver. They are never defaulted away:
a wrong selection means a wrong price.
"""

from .base import StorefrontException


class PricingException(StorefrontException):
    """Base exception for pricing errors."""
    pass


class IncompleteSelectionException(PricingException):
    """Raised when a required parameter group has neither a selection nor a default."""

    def __init__(self, product_id: int, parameter_group_id: int):
        super().__init__(
            f"Product {product_id} requires a selection for parameter group {parameter_group_id}",
            details={'product_id': product_id, 'parameter_group_id': parameter_group_id}
        )
        self.product_id = product_id
        self.parameter_group_id = parameter_group_id


class InvalidParameterException(PricingException):
    """Raised when a parameter does not belong to its group or the group is not attached."""

    def __init__(self, product_id: int, parameter_group_id: int, parameter_id: int | None, reason: str):
        super().__init__(
            f"Invalid parameter {parameter_id} for group {parameter_group_id} "
            f"on product {product_id}: {reason}",
            details={
                'product_id': product_id,
                'parameter_group_id': parameter_group_id,
                'parameter_id': parameter_id,
                'reason': reason
            }
        )
        self.product_id = product_id
        self.parameter_group_id = parameter_group_id
        self.parameter_id = parameter_id
        self.reason = reason
