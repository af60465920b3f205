from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"           # Created from a cart, awaiting processing
    PROCESSING = "processing"     # Being built / prepared by admin
    SHIPPED = "shipped"           # Handed over for delivery
    COMPLETED = "completed"       # Delivered (final)
    CANCELLED = "cancelled"       # Cancelled by admin (final)
