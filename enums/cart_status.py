from enum import Enum


class CartStatus(str, Enum):
    ACTIVE = "active"              # Open cart, at most one per user / guest session
    CHECKED_OUT = "checked_out"    # Converted into an order, kept as the order origin
