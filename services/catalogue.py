import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.cache_key import CacheKey
from enums.special_status import SpecialStatus
from exceptions.common import ValidationException
from exceptions.product import ProductNotFoundException, ParameterNotFoundException
from exceptions.special import SpecialNotFoundException
from repositories.product import ProductRepository, ParameterRepository
from repositories.special import SpecialRepository
from services.cache_invalidation import CacheInvalidationService
from utils.permission_utils import require_admin
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class CatalogueService:
    """
    Admin mutations of the public catalogue.

    Each one is admin-only, runs in its own transaction and, once committed,
    emits the listing cache keys whose content it changed.
    """

    @staticmethod
    async def set_product_enabled(product_id: int, is_enabled: bool, actor_admin_id: int | None,
                                  session: AsyncSession | Session) -> list[CacheKey]:
        """Soft-enable/disable a product. Products are never deleted while referenced."""
        require_admin(actor_admin_id)
        async with TransactionManager.atomic(session, "set_product_enabled"):
            if not await ProductRepository.set_enabled(product_id, is_enabled, session):
                raise ProductNotFoundException(product_id)
        logger.info(f"Admin {actor_admin_id} {'enabled' if is_enabled else 'disabled'} product {product_id}")
        # Specials embedding the product change availability too
        return await CacheInvalidationService.emit(
            [CacheKey.PRODUCTS, CacheKey.CATEGORIES, CacheKey.SPECIALS, CacheKey.HOME]
        )

    @staticmethod
    async def set_parameter_price(parameter_id: int, price_modifier: float, actor_admin_id: int | None,
                                  session: AsyncSession | Session) -> list[CacheKey]:
        require_admin(actor_admin_id)
        price_modifier = round(price_modifier, 2)
        async with TransactionManager.atomic(session, "set_parameter_price"):
            if not await ParameterRepository.update_price_modifier(parameter_id, price_modifier, session):
                raise ParameterNotFoundException(parameter_id)
        logger.info(f"Admin {actor_admin_id} set price modifier of parameter {parameter_id} to {price_modifier:+.2f}")
        return await CacheInvalidationService.emit(
            [CacheKey.PARAMETER_GROUPS, CacheKey.PRODUCTS, CacheKey.SPECIALS]
        )

    @staticmethod
    async def set_special_status(special_id: int, status: SpecialStatus | str, actor_admin_id: int | None,
                                 session: AsyncSession | Session) -> list[CacheKey]:
        require_admin(actor_admin_id)
        if not isinstance(status, SpecialStatus):
            try:
                status = SpecialStatus(status)
            except ValueError:
                raise ValidationException(f"Unknown special status '{status}'", details={'status': status})

        async with TransactionManager.atomic(session, "set_special_status"):
            if not await SpecialRepository.update_status(special_id, status, session):
                raise SpecialNotFoundException(special_id)
        logger.info(f"Admin {actor_admin_id} set special {special_id} to {status.value}")
        return await CacheInvalidationService.emit([CacheKey.SPECIALS, CacheKey.HOME])
