"""
Product-related exceptions.
"""

from .common import NotFoundException, ValidationException


class ProductNotFoundException(NotFoundException):
    """Raised when product is not found in database."""

    def __init__(self, product_id: int):
        super().__init__("product", product_id)
        self.product_id = product_id


class ProductUnavailableException(ValidationException):
    """Raised when a soft-disabled product is added to a cart or checked out."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} is not available",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ParameterNotFoundException(NotFoundException):
    """Raised when parameter is not found in database."""

    def __init__(self, parameter_id: int):
        super().__init__("parameter", parameter_id)
        self.parameter_id = parameter_id
