import logging

from exceptions.pricing import IncompleteSelectionException, InvalidParameterException
from models.product import ProductDTO
from utils.selection import normalize_selection

logger = logging.getLogger(__name__)


class PricingService:
    """Parameter-driven unit pricing for configurable products."""

    @staticmethod
    def resolve_selection(product: ProductDTO, selection: dict[int, int] | None) -> dict[int, int]:
        """
        Complete a customer selection against the product's attached parameter groups.

        Every attached group ends up with exactly one parameter: the supplied one
        or, when the group is omitted, the attachment default.

        Args:
            product: Product snapshot with attached groups and their parameters
            selection: Mapping parameter_group_id -> parameter_id (may be partial)

        Returns:
            Complete mapping parameter_group_id -> parameter_id

        Raises:
            InvalidParameterException: A supplied group is not attached to the product,
                or a supplied parameter does not belong to its claimed group
            IncompleteSelectionException: A group without default was not selected
        """
        selection = normalize_selection(selection)

        for group_id, parameter_id in selection.items():
            group = product.get_parameter_group(group_id)
            if group is None:
                raise InvalidParameterException(product.id, group_id, parameter_id, "group is not attached to product")
            if group.get_parameter(parameter_id) is None:
                raise InvalidParameterException(product.id, group_id, parameter_id, "parameter does not belong to group")

        resolved: dict[int, int] = {}
        for group in product.parameter_groups:
            parameter_id = selection.get(group.parameter_group_id)
            if parameter_id is None:
                if group.default_parameter_id is None:
                    raise IncompleteSelectionException(product.id, group.parameter_group_id)
                if group.get_parameter(group.default_parameter_id) is None:
                    # Default points at a parameter that was removed from the group
                    raise InvalidParameterException(
                        product.id, group.parameter_group_id, group.default_parameter_id,
                        "default parameter no longer exists"
                    )
                parameter_id = group.default_parameter_id
            resolved[group.parameter_group_id] = parameter_id
        return resolved

    @staticmethod
    def resolve_unit_price(product: ProductDTO, selection: dict[int, int] | None) -> float:
        """
        Unit price = base price + sum of the price modifier of every selected parameter.

        Pure: reads only the given snapshot. Rounded to 2 decimals.

        Example:
            base 100, Color group (default red +0, blue +5), selection {color: blue} -> 105.0
        """
        resolved = PricingService.resolve_selection(product, selection)
        unit_price = product.base_price
        for group_id, parameter_id in resolved.items():
            unit_price += product.get_parameter_group(group_id).get_parameter(parameter_id).price_modifier
        return round(unit_price, 2)
