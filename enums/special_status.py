from enum import Enum


class SpecialStatus(str, Enum):
    DRAFT = "draft"            # Authored but not visible in the storefront
    AVAILABLE = "available"    # Visible and purchasable
    EXPIRED = "expired"        # No longer purchasable
