from enum import Enum


class HistoryEntityType(str, Enum):
    ORDER = "order"
    ORDER_LINE_ITEM = "order_line_item"


class HistoryAction(str, Enum):
    ORDER_CREATED = "order_created"
    STATUS_CHANGED = "status_changed"
    LINE_ITEM_ADDED = "line_item_added"
    ORDER_UPDATED = "order_updated"
    ORDER_DELETED = "order_deleted"
