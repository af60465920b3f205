import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from exceptions.base import StorefrontException
from exceptions.cart import InvalidIdentityException, MergeFailedException, CartNotFoundException, \
    CartItemNotFoundException
from exceptions.common import StorageException, ValidationException
from exceptions.product import ProductNotFoundException, ProductUnavailableException
from exceptions.special import SpecialNotFoundException, SpecialUnavailableException
from models.cart import CartDTO, UserOwner, GuestOwner
from models.cartItem import CartItemDTO, AddProductToCartRequest, AddSpecialToCartRequest, UpdateCartItemRequest, \
    CartViewDTO
from repositories.cart import CartRepository
from repositories.cartItem import CartItemRepository
from repositories.product import ProductRepository
from repositories.special import SpecialRepository
from services.pricing import PricingService
from services.special import SpecialService
from utils.request_validation import validate_request
from utils.transaction_manager import TransactionManager

logger = logging.getLogger(__name__)


class CartService:

    @staticmethod
    def resolve_cart_owner(user_id: int | None, guest_session_id: str | None) -> UserOwner | GuestOwner:
        """
        Turn the two optional identifiers of the auth layer into exactly one owner.

        Raises:
            InvalidIdentityException: Both or neither identifier given
        """
        has_user = user_id is not None
        has_guest = bool(guest_session_id)
        if has_user == has_guest:
            raise InvalidIdentityException(user_id, guest_session_id)
        if has_user:
            return UserOwner(user_id=user_id)
        return GuestOwner(session_id=guest_session_id)

    @staticmethod
    async def get_or_create_cart(user_id: int | None, guest_session_id: str | None,
                                 session: AsyncSession | Session) -> CartDTO:
        owner = CartService.resolve_cart_owner(user_id, guest_session_id)
        try:
            async with TransactionManager.atomic(session, "get_or_create_cart"):
                cart, created = await CartRepository.get_or_create(owner, session)
        except StorageException as e:
            if not e.integrity_violation:
                raise
            # A concurrent request created the active cart first
            cart = await CartRepository.get_active(owner, session)
            if cart is None:
                raise
            created = False
        if created:
            logger.info(f"Created cart {cart.id} for {owner.kind}")
        return cart

    @staticmethod
    async def _upsert_line(cart_id: int, line: CartItemDTO, session: AsyncSession | Session) -> CartItemDTO:
        """Same product with the same complete selection (or the same special) accumulates quantity."""
        existing = await CartItemRepository.find_matching_line(cart_id, line, session)
        if existing is None:
            return await CartItemRepository.create(line.model_copy(update={'cart_id': cart_id}), session)
        await CartItemRepository.increment_quantity(existing.id, line.quantity, session)
        return existing.model_copy(update={'quantity': existing.quantity + line.quantity})

    @staticmethod
    async def add_product_to_cart(request: AddProductToCartRequest | dict,
                                  session: AsyncSession | Session) -> CartItemDTO:
        """
        Add a configured product to the owner's active cart.

        The selection is completed with attachment defaults before matching, so
        "no choice" and "explicitly chose the default" end up on the same line.
        The unit price snapshot is resolved now and is authoritative until checkout.
        """
        if not isinstance(request, AddProductToCartRequest):
            request = validate_request(AddProductToCartRequest, request)
        owner = CartService.resolve_cart_owner(request.user_id, request.guest_session_id)
        async with TransactionManager.atomic(session, "add_product_to_cart"):
            product = await ProductRepository.get_by_id_with_parameters(request.product_id, session)
            if product is None:
                raise ProductNotFoundException(request.product_id)
            if not product.is_enabled:
                raise ProductUnavailableException(request.product_id)

            selection = PricingService.resolve_selection(product, request.selected_parameters)
            unit_price = PricingService.resolve_unit_price(product, selection)

            cart, _ = await CartRepository.get_or_create(owner, session)
            line = await CartService._upsert_line(cart.id, CartItemDTO(
                product_id=product.id,
                quantity=request.quantity,
                selected_parameters=selection,
                unit_price=unit_price,
            ), session)

        logger.info(f"Cart {cart.id}: product {product.id} x{request.quantity} at {unit_price:.2f} "
                    f"(line {line.id}, quantity {line.quantity})")
        return line

    @staticmethod
    async def add_special_to_cart(request: AddSpecialToCartRequest | dict,
                                  session: AsyncSession | Session) -> CartItemDTO:
        """Add a special as a single line priced at its authored bundle price."""
        if not isinstance(request, AddSpecialToCartRequest):
            request = validate_request(AddSpecialToCartRequest, request)
        owner = CartService.resolve_cart_owner(request.user_id, request.guest_session_id)
        async with TransactionManager.atomic(session, "add_special_to_cart"):
            special = await SpecialRepository.get_by_id(request.special_id, session)
            if special is None:
                raise SpecialNotFoundException(request.special_id)

            products = await ProductRepository.get_by_ids_with_parameters(
                SpecialService.referenced_product_ids([special]), session
            )
            availability = SpecialService.check_availability(special, products)
            if not availability.is_available:
                raise SpecialUnavailableException(special.id, availability.reasons)

            cart, _ = await CartRepository.get_or_create(owner, session)
            line = await CartService._upsert_line(cart.id, CartItemDTO(
                special_id=special.id,
                quantity=request.quantity,
                unit_price=round(special.price, 2),
            ), session)

        logger.info(f"Cart {cart.id}: special {special.id} x{request.quantity} at {special.price:.2f}")
        return line

    @staticmethod
    async def calculate_cart_total(cart_id: int, session: AsyncSession | Session) -> float:
        """Sum of snapshot price x quantity. Never re-resolves against the current catalogue."""
        cart = await CartRepository.get_by_id(cart_id, session)
        if cart is None:
            raise CartNotFoundException(cart_id)
        cart_items = await CartItemRepository.get_by_cart_id(cart_id, session)
        return round(sum(cart_item.line_total for cart_item in cart_items), 2)

    @staticmethod
    async def get_cart_view(user_id: int | None, guest_session_id: str | None,
                            session: AsyncSession | Session) -> CartViewDTO:
        cart = await CartService.get_or_create_cart(user_id, guest_session_id, session)
        cart_items = await CartItemRepository.get_by_cart_id(cart.id, session)
        return CartViewDTO(
            cart=cart,
            items=cart_items,
            total=round(sum(cart_item.line_total for cart_item in cart_items), 2),
        )

    @staticmethod
    async def _get_owned_item(owner: UserOwner | GuestOwner, cart_item_id: int,
                              session: AsyncSession | Session) -> CartItemDTO:
        cart = await CartRepository.get_active(owner, session)
        cart_item = await CartItemRepository.get_by_id(cart_item_id, session)
        if cart is None or cart_item is None or cart_item.cart_id != cart.id:
            raise CartItemNotFoundException(cart_item_id)
        return cart_item

    @staticmethod
    async def update_cart_item_quantity(user_id: int | None, guest_session_id: str | None,
                                        request: UpdateCartItemRequest | dict,
                                        session: AsyncSession | Session) -> CartItemDTO:
        if not isinstance(request, UpdateCartItemRequest):
            request = validate_request(UpdateCartItemRequest, request)
        owner = CartService.resolve_cart_owner(user_id, guest_session_id)
        async with TransactionManager.atomic(session, "update_cart_item_quantity"):
            cart_item = await CartService._get_owned_item(owner, request.cart_item_id, session)
            await CartItemRepository.update_quantity(cart_item.id, request.quantity, session)
        return cart_item.model_copy(update={'quantity': request.quantity})

    @staticmethod
    async def remove_cart_item(user_id: int | None, guest_session_id: str | None, cart_item_id: int,
                               session: AsyncSession | Session) -> None:
        owner = CartService.resolve_cart_owner(user_id, guest_session_id)
        async with TransactionManager.atomic(session, "remove_cart_item"):
            cart_item = await CartService._get_owned_item(owner, cart_item_id, session)
            await CartItemRepository.delete(cart_item.id, session)
        logger.info(f"Removed line {cart_item_id} from cart {cart_item.cart_id}")

    @staticmethod
    async def remove_special_from_cart(user_id: int | None, guest_session_id: str | None, special_id: int,
                                       session: AsyncSession | Session) -> int:
        """Remove the special's line from the owner's active cart. Returns the number of removed lines."""
        owner = CartService.resolve_cart_owner(user_id, guest_session_id)
        async with TransactionManager.atomic(session, "remove_special_from_cart"):
            cart = await CartRepository.get_active(owner, session)
            if cart is None:
                return 0
            removed = await CartItemRepository.delete_by_special(cart.id, special_id, session)
        return removed

    @staticmethod
    async def migrate_guest_cart_to_user(user_id: int, guest_session_id: str,
                                         session: AsyncSession | Session) -> CartDTO:
        """
        Move the guest's active cart to the user.

        - No guest cart: nothing to merge, returns the user's active cart (created if missing).
        - User has no active cart: the guest cart is reassigned to the user.
        - Otherwise every guest line is merged into the user cart with the add-to-cart
          upsert rule, then the empty guest cart is deleted.

        All or nothing: on any failure the transaction is rolled back and both carts
        are left exactly as they were.

        Raises:
            ValidationException: user_id or guest_session_id missing
            MergeFailedException: The merge could not be completed
        """
        if user_id is None or not guest_session_id:
            raise ValidationException(
                "Cart merge requires both a user id and a guest session id",
                details={'user_id': user_id, 'has_guest_session': bool(guest_session_id)}
            )

        guest_owner = GuestOwner(session_id=guest_session_id)
        user_owner = UserOwner(user_id=user_id)
        try:
            async with TransactionManager.atomic(session, "migrate_guest_cart_to_user"):
                guest_cart = await CartRepository.get_active(guest_owner, session)
                user_cart = await CartRepository.get_active(user_owner, session)
                if guest_cart is None:
                    cart, _ = await CartRepository.get_or_create(user_owner, session)
                    return cart

                if user_cart is None:
                    await CartRepository.reassign_to_user(guest_cart.id, user_id, session)
                    logger.info(f"Reassigned guest cart {guest_cart.id} to user {user_id}")
                    return await CartRepository.get_by_id(guest_cart.id, session)

                guest_items = await CartItemRepository.get_by_cart_id(guest_cart.id, session)
                merged = 0
                for guest_item in guest_items:
                    existing = await CartItemRepository.find_matching_line(user_cart.id, guest_item, session)
                    if existing is None:
                        await CartItemRepository.move_to_cart(guest_item.id, user_cart.id, session)
                    else:
                        await CartItemRepository.increment_quantity(existing.id, guest_item.quantity, session)
                        await CartItemRepository.delete(guest_item.id, session)
                        merged += 1
                await CartRepository.delete(guest_cart.id, session)
        except StorefrontException as e:
            logger.error(f"Cart merge for user {user_id} failed: {e.message}")
            raise MergeFailedException(user_id, guest_session_id, e.message) from e

        logger.info(f"Merged guest cart {guest_cart.id} into cart {user_cart.id} of user {user_id}: "
                    f"{len(guest_items)} lines, {merged} combined with existing lines")
        return user_cart
