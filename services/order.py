import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.cart_status import CartStatus
from enums.history import HistoryEntityType, HistoryAction
from enums.order_status import OrderStatus
from exceptions.cart import CartNotFoundException, EmptyCartException
from exceptions.common import StorageException, ValidationException
from exceptions.order import OrderNotFoundException, OrderLockedException, DuplicateOrderException, \
    InvalidTransitionException
from exceptions.product import ProductNotFoundException, ProductUnavailableException
from exceptions.special import SpecialNotFoundException, SpecialUnavailableException
from models.cartItem import CartItemDTO
from models.order import OrderDTO, CreateOrderRequest, UpdateOrderDetailsRequest
from models.orderItem import OrderLineItemDTO, OrderLineItemRequest
from repositories.cart import CartRepository
from repositories.cartItem import CartItemRepository
from repositories.order import OrderRepository
from repositories.orderItem import OrderLineItemRepository
from repositories.product import ProductRepository
from repositories.special import SpecialRepository
from services.history import HistoryService
from services.notification import NotificationService
from services.pricing import PricingService
from services.special import SpecialService
from utils.order_state_machine import OrderStateMachine
from utils.permission_utils import require_admin
from utils.request_validation import validate_request
from utils.transaction_manager import TransactionManager


class OrderService:

    @staticmethod
    def _history_payload(order: OrderDTO) -> dict:
        return order.model_dump(mode="json", include={'status', 'total_price', 'cart_id', 'user_id'})

    @staticmethod
    def _calculate_total(line_items: list[OrderLineItemDTO]) -> float:
        return round(sum(line_item.line_total for line_item in line_items), 2)

    @staticmethod
    async def _snapshot_cart_lines(cart_items: list[CartItemDTO],
                                   session: AsyncSession | Session) -> list[OrderLineItemDTO]:
        """
        Re-validate every cart line against the current catalogue and snapshot it.

        Prices are re-resolved here: the cart snapshot is only a display value.
        All referenced products and specials are loaded up front in batch.
        """
        special_ids = {cart_item.special_id for cart_item in cart_items if cart_item.special_id is not None}
        specials = await SpecialRepository.get_by_ids(special_ids, session)
        product_ids = {cart_item.product_id for cart_item in cart_items if cart_item.product_id is not None}
        product_ids |= SpecialService.referenced_product_ids(list(specials.values()))
        products = await ProductRepository.get_by_ids_with_parameters(product_ids, session)

        line_items = []
        for cart_item in cart_items:
            if cart_item.special_id is not None:
                special = specials.get(cart_item.special_id)
                if special is None:
                    raise SpecialNotFoundException(cart_item.special_id)
                availability = SpecialService.check_availability(special, products)
                if not availability.is_available:
                    raise SpecialUnavailableException(special.id, availability.reasons)
                unit_price = round(special.price, 2)
                line_items.append(OrderLineItemDTO(
                    special_id=special.id,
                    product_name=special.name,
                    quantity=cart_item.quantity,
                    unit_price=unit_price,
                ))
            else:
                product = products.get(cart_item.product_id)
                if product is None:
                    raise ProductNotFoundException(cart_item.product_id)
                if not product.is_enabled:
                    raise ProductUnavailableException(product.id)
                selection = PricingService.resolve_selection(product, cart_item.selected_parameters)
                unit_price = PricingService.resolve_unit_price(product, selection)
                line_items.append(OrderLineItemDTO(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=cart_item.quantity,
                    unit_price=unit_price,
                    selected_parameters=selection,
                ))

            if unit_price != cart_item.unit_price:
                logging.warning(
                    f"Cart line {cart_item.id} price changed since it was added: "
                    f"{cart_item.unit_price:.2f} -> {unit_price:.2f}, using current price"
                )
        return line_items

    @staticmethod
    async def create_order(request: CreateOrderRequest | dict, session: AsyncSession | Session) -> OrderDTO:
        """
        Convert a cart into a pending order.

        Steps (single transaction):
        1. Return the existing order if this cart was already converted
        2. Re-validate and snapshot every cart line (name, price, selection)
        3. Insert order + line items, total = sum of line totals
        4. Record history 'order_created'
        5. Mark the cart checked out

        Retries are safe: orders.cart_id is unique, so a concurrent second
        conversion fails on the constraint and the winner's order is returned.
        The customer notification is sent after commit; its failure is only logged.

        Raises:
            ValidationException: Malformed request, cart already checked out, or empty cart
            CartNotFoundException: Unknown cart
            ProductUnavailableException / SpecialUnavailableException: Catalogue changed
            PricingException: A line's selection no longer resolves
        """
        if not isinstance(request, CreateOrderRequest):
            request = validate_request(CreateOrderRequest, request)

        try:
            async with TransactionManager.atomic(session, "create_order"):
                existing = await OrderRepository.get_by_cart_id(request.cart_id, session)
                if existing is not None:
                    raise DuplicateOrderException(request.cart_id, existing.id)

                cart = await CartRepository.get_by_id(request.cart_id, session)
                if cart is None:
                    raise CartNotFoundException(request.cart_id)
                if cart.status != CartStatus.ACTIVE:
                    raise ValidationException(
                        f"Cart {cart.id} is already checked out",
                        details={'cart_id': cart.id}
                    )
                if request.user_id is not None and cart.user_id is not None and cart.user_id != request.user_id:
                    raise ValidationException(
                        f"Cart {cart.id} does not belong to user {request.user_id}",
                        details={'cart_id': cart.id, 'user_id': request.user_id}
                    )

                cart_items = await CartItemRepository.get_by_cart_id(cart.id, session)
                if not cart_items:
                    raise EmptyCartException(cart.id)

                line_items = await OrderService._snapshot_cart_lines(cart_items, session)
                order = await OrderRepository.create(OrderDTO(
                    cart_id=cart.id,
                    user_id=request.user_id if request.user_id is not None else cart.user_id,
                    status=OrderStatus.PENDING,
                    name=request.name,
                    phone=request.phone,
                    secondary_phone=request.secondary_phone,
                    address=request.address,
                    total_price=OrderService._calculate_total(line_items),
                ), session)
                line_items = await OrderLineItemRepository.create_many(
                    [line_item.model_copy(update={'order_id': order.id}) for line_item in line_items], session
                )
                order = order.model_copy(update={'items': line_items})

                await HistoryService.record(
                    HistoryEntityType.ORDER, order.id, None, HistoryAction.ORDER_CREATED,
                    None, OrderService._history_payload(order) | {'line_items': len(line_items)}, session
                )
                await CartRepository.update_status(cart.id, CartStatus.CHECKED_OUT, session)

        except DuplicateOrderException as e:
            logging.info(f"Cart {e.cart_id} already converted into order {e.order_id}, returning existing order")
            return await OrderService.get_order(e.order_id, session)

        except StorageException as e:
            if not e.integrity_violation:
                raise
            existing = await OrderRepository.get_by_cart_id(request.cart_id, session)
            if existing is None:
                raise
            logging.warning(
                f"Concurrent checkout of cart {request.cart_id} lost the race, returning order {existing.id}"
            )
            return await OrderService.get_order(existing.id, session)

        logging.info(f"✅ Order {order.id} created from cart {order.cart_id} "
                     f"({len(order.items)} lines, total {order.total_price:.2f})")
        await NotificationService.order_created(order)
        return order

    @staticmethod
    async def update_order_status(order_id: int, new_status: OrderStatus | str, actor_admin_id: int | None,
                                  session: AsyncSession | Session) -> OrderDTO:
        """
        Move an order along the state machine. The total is never touched.

        Raises:
            UnauthorizedException: Actor is not an admin
            OrderNotFoundException: Unknown order
            InvalidTransitionException: Transition not allowed (including same status)
        """
        require_admin(actor_admin_id)
        if not isinstance(new_status, OrderStatus):
            try:
                new_status = OrderStatus(new_status)
            except ValueError:
                raise ValidationException(
                    f"Unknown order status '{new_status}'",
                    details={'status': new_status}
                )

        async with TransactionManager.atomic(session, "update_order_status"):
            order = await OrderRepository.get_by_id(order_id, session)
            if order is None:
                raise OrderNotFoundException(order_id)

            OrderStateMachine.validate_transition(order.id, order.status, new_status, actor_admin_id)
            updated = await OrderRepository.update_status(order.id, new_status, order.status, session)
            if not updated:
                # Status was changed by a concurrent request after we read it
                raise InvalidTransitionException(order.id, order.status.value, new_status.value)

            await HistoryService.record(
                HistoryEntityType.ORDER, order.id, actor_admin_id, HistoryAction.STATUS_CHANGED,
                {'status': order.status.value}, {'status': new_status.value}, session
            )

        return order.model_copy(update={'status': new_status})

    @staticmethod
    async def add_order_line_item(order_id: int, item: OrderLineItemRequest | dict, actor_admin_id: int | None,
                                  session: AsyncSession | Session) -> OrderDTO:
        """
        Append an admin-supplied line item and recompute the order total.

        The line is stored exactly as supplied; it is not derived from the live catalogue.

        Raises:
            UnauthorizedException: Actor is not an admin
            ValidationException: Malformed line item
            OrderNotFoundException: Unknown order
            OrderLockedException: Order is no longer pending or processing
            ProductNotFoundException / SpecialNotFoundException: The line references an unknown product or special
        """
        require_admin(actor_admin_id)
        if not isinstance(item, OrderLineItemRequest):
            item = validate_request(OrderLineItemRequest, item)

        async with TransactionManager.atomic(session, "add_order_line_item"):
            order = await OrderRepository.get_by_id(order_id, session)
            if order is None:
                raise OrderNotFoundException(order_id)
            if not OrderStateMachine.allows_modification(order.status):
                logging.warning(f"Rejected line item for order {order.id} in status {order.status.value}")
                raise OrderLockedException(order.id, order.status.value)

            # Only the reference is checked; name, price and selection stay as supplied
            if item.product_id is not None:
                if await ProductRepository.get_by_id_with_parameters(item.product_id, session) is None:
                    raise ProductNotFoundException(item.product_id)
            elif await SpecialRepository.get_by_id(item.special_id, session) is None:
                raise SpecialNotFoundException(item.special_id)

            line_item = await OrderLineItemRepository.create(
                OrderLineItemDTO(order_id=order.id, **item.model_dump()), session
            )
            line_items = await OrderLineItemRepository.get_by_order_id(order.id, session)
            new_total = OrderService._calculate_total(line_items)
            await OrderRepository.update_total(order.id, new_total, session)

            await HistoryService.record(
                HistoryEntityType.ORDER_LINE_ITEM, line_item.id, actor_admin_id, HistoryAction.LINE_ITEM_ADDED,
                {'order_id': order.id, 'order_total': order.total_price},
                line_item.model_dump(mode="json", exclude={'id', 'created_at'}) | {'order_total': new_total},
                session
            )
            # Same change on the order's own timeline
            await HistoryService.record(
                HistoryEntityType.ORDER, order.id, actor_admin_id, HistoryAction.LINE_ITEM_ADDED,
                {'total_price': order.total_price},
                {'total_price': new_total, 'line_item_id': line_item.id},
                session
            )

        logging.info(f"Order {order.id}: admin {actor_admin_id} added line {line_item.id}, "
                     f"total {order.total_price:.2f} -> {new_total:.2f}")
        return order.model_copy(update={'total_price': new_total, 'items': line_items})

    @staticmethod
    async def get_order(order_id: int, session: AsyncSession | Session) -> OrderDTO:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        line_items = await OrderLineItemRepository.get_by_order_id(order.id, session)
        return order.model_copy(update={'items': line_items})

    @staticmethod
    async def get_user_orders(user_id: int, session: AsyncSession | Session) -> list[OrderDTO]:
        """All orders of a user, newest first, with line items (two queries)."""
        orders = await OrderRepository.get_by_user_id(user_id, session)
        line_items = await OrderLineItemRepository.get_by_order_ids([order.id for order in orders], session)
        return [order.model_copy(update={'items': line_items.get(order.id, [])}) for order in orders]

    @staticmethod
    async def update_order_details(order_id: int, request: UpdateOrderDetailsRequest | dict,
                                   actor_admin_id: int | None, session: AsyncSession | Session) -> OrderDTO:
        """Change customer contact fields while the order is still pending or processing."""
        require_admin(actor_admin_id)
        if not isinstance(request, UpdateOrderDetailsRequest):
            request = validate_request(UpdateOrderDetailsRequest, request)
        fields = request.changed_fields()
        if not fields:
            raise ValidationException("No order fields to update", details={'order_id': order_id})

        async with TransactionManager.atomic(session, "update_order_details"):
            order = await OrderRepository.get_by_id(order_id, session)
            if order is None:
                raise OrderNotFoundException(order_id)
            if not OrderStateMachine.allows_modification(order.status):
                raise OrderLockedException(order.id, order.status.value)

            before = {field: getattr(order, field) for field in fields}
            await OrderRepository.update_details(order.id, fields, session)
            await HistoryService.record(
                HistoryEntityType.ORDER, order.id, actor_admin_id, HistoryAction.ORDER_UPDATED,
                before, fields, session
            )

        logging.info(f"Order {order.id}: admin {actor_admin_id} updated {', '.join(fields)}")
        return await OrderService.get_order(order.id, session)

    @staticmethod
    async def delete_order(order_id: int, actor_admin_id: int | None, session: AsyncSession | Session) -> None:
        """
        Purge an order and its line items.

        The history entries of the order stay: an 'order_deleted' entry with the
        full final snapshot is appended before the rows are removed.
        """
        require_admin(actor_admin_id)
        async with TransactionManager.atomic(session, "delete_order"):
            order = await OrderService.get_order(order_id, session)
            await HistoryService.record(
                HistoryEntityType.ORDER, order.id, actor_admin_id, HistoryAction.ORDER_DELETED,
                order.model_dump(mode="json", exclude={'created_at', 'updated_at'}), None, session
            )
            await OrderLineItemRepository.delete_by_order_id(order.id, session)
            await OrderRepository.delete(order.id, session)

        logging.info(f"🗑️ Order {order_id} deleted by admin {actor_admin_id}")
