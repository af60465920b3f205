import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.special_status import SpecialStatus
from exceptions.pricing import PricingException
from exceptions.product import ProductNotFoundException
from exceptions.special import SpecialNotFoundException
from models.product import ProductDTO
from models.special import SpecialDTO, SpecialAvailabilityDTO, SpecialPricingDTO
from repositories.product import ProductRepository
from repositories.special import SpecialRepository
from services.pricing import PricingService

logger = logging.getLogger(__name__)


class SpecialService:
    """
    Special (bundle) pricing.

    The bundle price is authored on the special. The "original" price is the
    itemized baseline used to display the discount. Both pricing functions here
    are pure: callers pre-fetch every referenced product once with
    ProductRepository.get_by_ids_with_parameters() and pass the map in.
    """

    @staticmethod
    def referenced_product_ids(specials: list[SpecialDTO]) -> set[int]:
        return {item.product_id for special in specials for item in special.items}

    @staticmethod
    def calculate_original_price(special: SpecialDTO, products: dict[int, ProductDTO]) -> float:
        """
        Sum of resolve_unit_price(product, item selection) x item quantity.

        Raises:
            ProductNotFoundException: A constituent product is missing from the pre-loaded map
            PricingException: A constituent selection no longer resolves
        """
        total = 0.0
        for item in special.items:
            product = products.get(item.product_id)
            if product is None:
                raise ProductNotFoundException(item.product_id)
            total += PricingService.resolve_unit_price(product, item.selected_parameters) * item.quantity
        return round(total, 2)

    @staticmethod
    def calculate_original_prices(specials: list[SpecialDTO], products: dict[int, ProductDTO]) -> dict[int, float]:
        """
        Batch original price over N specials in one pass.

        Never fetches: everything comes from the pre-loaded product map, so the
        result equals N calls of calculate_original_price with the same map.

        Returns:
            Dict mapping special_id -> original price
        """
        return {
            special.id: SpecialService.calculate_original_price(special, products)
            for special in specials
        }

    @staticmethod
    def check_availability(special: SpecialDTO, products: dict[int, ProductDTO]) -> SpecialAvailabilityDTO:
        """
        A special is available only if it is published and every constituent still resolves.

        Checks status, product presence, product enabled flag, and that every
        referenced parameter still exists in an attached group.
        """
        reasons = []
        if special.status != SpecialStatus.AVAILABLE:
            reasons.append(f"special is {special.status.value}")
        if not special.items:
            reasons.append("special has no items")

        for item in special.items:
            product = products.get(item.product_id)
            if product is None:
                reasons.append(f"product {item.product_id} no longer exists")
                continue
            if not product.is_enabled:
                reasons.append(f"product {item.product_id} is disabled")
                continue
            try:
                PricingService.resolve_selection(product, item.selected_parameters)
            except PricingException as e:
                reasons.append(e.message)

        return SpecialAvailabilityDTO(special_id=special.id, is_available=not reasons, reasons=reasons)

    @staticmethod
    def discount_percent(price: float, original_price: float) -> int:
        """Whole-number discount of the bundle price against the itemized price (0 when no saving)."""
        if original_price <= 0 or price >= original_price:
            return 0
        return int(round((original_price - price) / original_price * 100))

    @staticmethod
    def build_pricing(specials: list[SpecialDTO], products: dict[int, ProductDTO]) -> list[SpecialPricingDTO]:
        """Display pricing for several specials; unavailable ones are reported, not partially priced."""
        available = []
        pricing_by_id: dict[int, SpecialPricingDTO] = {}
        for special in specials:
            availability = SpecialService.check_availability(special, products)
            pricing_by_id[special.id] = SpecialPricingDTO(
                special_id=special.id,
                name=special.name,
                price=special.price,
                is_available=availability.is_available,
                reasons=availability.reasons,
            )
            if availability.is_available:
                available.append(special)

        original_prices = SpecialService.calculate_original_prices(available, products)
        for special_id, original_price in original_prices.items():
            pricing = pricing_by_id[special_id]
            pricing.original_price = original_price
            pricing.discount_percent = SpecialService.discount_percent(pricing.price, original_price)

        return [pricing_by_id[special.id] for special in specials]

    @staticmethod
    async def get_pricing(special_id: int, session: AsyncSession | Session) -> SpecialPricingDTO:
        special = await SpecialRepository.get_by_id(special_id, session)
        if special is None:
            raise SpecialNotFoundException(special_id)
        products = await ProductRepository.get_by_ids_with_parameters(
            SpecialService.referenced_product_ids([special]), session
        )
        return SpecialService.build_pricing([special], products)[0]

    @staticmethod
    async def list_available_specials(session: AsyncSession | Session) -> list[SpecialPricingDTO]:
        """Published specials with their discount, constituents pre-fetched in one batch."""
        specials = await SpecialRepository.get_all(session, status=SpecialStatus.AVAILABLE)
        products = await ProductRepository.get_by_ids_with_parameters(
            SpecialService.referenced_product_ids(specials), session
        )
        pricing = SpecialService.build_pricing(specials, products)
        logger.debug(f"Priced {len(pricing)} available specials against {len(products)} products")
        return [entry for entry in pricing if entry.is_available]
