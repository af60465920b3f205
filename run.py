import asyncio
import logging

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from db import create_db_and_tables
from models.order import OrderDTO
from services.cache_invalidation import CacheInvalidationService, RedisCacheInvalidator
from services.notification import NotificationService


async def log_order_created(order: OrderDTO) -> None:
    # Outbound email is wired by the host application; this keeps a trace in the engine log
    logging.info(f"📢 New order {order.id}: {len(order.items)} lines, total {order.total_price:.2f}")


async def startup() -> None:
    """Prepare the engine for the host application: schema, side channels."""
    await create_db_and_tables()
    logging.info("✅ Database schema ready")

    if config.CACHE_INVALIDATION_ENABLED:
        invalidator = RedisCacheInvalidator.from_config()
        CacheInvalidationService.subscribe(invalidator)
        logging.info(f"✅ Cache invalidation via Redis {config.REDIS_HOST}:{config.REDIS_PORT} "
                     f"(prefix '{config.CACHE_KEY_PREFIX}')")

    NotificationService.register_order_created_sender(log_order_created)


if __name__ == '__main__':
    asyncio.run(startup())
