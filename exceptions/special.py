"""
Special (bundle) related exceptions.
"""

from .common import NotFoundException, ValidationException


class SpecialNotFoundException(NotFoundException):
    """Raised when special is not found in database."""

    def __init__(self, special_id: int):
        super().__init__("special", special_id)
        self.special_id = special_id


class SpecialUnavailableException(ValidationException):
    """Raised when a special is not purchasable (wrong status or unavailable constituents)."""

    def __init__(self, special_id: int, reasons: list[str]):
        super().__init__(
            f"Special {special_id} is unavailable: {'; '.join(reasons)}",
            details={'special_id': special_id, 'reasons': reasons}
        )
        self.special_id = special_id
        self.reasons = reasons
