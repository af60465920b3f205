"""
Unit Tests: PricingService (parameter pricing resolver)

The resolver is pure, so most tests build ProductDTO snapshots directly.
"""

import pytest

from exceptions.pricing import IncompleteSelectionException, InvalidParameterException
from models.parameter import ParameterDTO
from models.product import ProductDTO, ProductParameterGroupDTO
from repositories.product import ProductRepository
from services.pricing import PricingService


def make_product(base_price: float = 100.0) -> ProductDTO:
    """Base 100; Color (default red +0, blue +5); Finish without default (matte +0, gloss +12.25)."""
    return ProductDTO(
        id=1,
        name="Enclosure",
        base_price=base_price,
        parameter_groups=[
            ProductParameterGroupDTO(
                parameter_group_id=10,
                name="Color",
                default_parameter_id=101,
                parameters=[
                    ParameterDTO(id=101, parameter_group_id=10, name="Red", price_modifier=0.0),
                    ParameterDTO(id=102, parameter_group_id=10, name="Blue", price_modifier=5.0),
                ],
            ),
            ProductParameterGroupDTO(
                parameter_group_id=20,
                name="Finish",
                default_parameter_id=None,
                parameters=[
                    ParameterDTO(id=201, parameter_group_id=20, name="Matte", price_modifier=0.0),
                    ParameterDTO(id=202, parameter_group_id=20, name="Gloss", price_modifier=12.25),
                ],
            ),
        ],
    )


class TestResolveUnitPrice:

    def test_complete_selection_adds_every_delta(self):
        product = make_product()
        assert PricingService.resolve_unit_price(product, {10: 102, 20: 202}) == 117.25

    def test_omitted_group_uses_default(self):
        product = make_product()
        without_color = PricingService.resolve_unit_price(product, {20: 201})
        with_default = PricingService.resolve_unit_price(product, {10: 101, 20: 201})
        assert without_color == with_default == 100.0

    def test_negative_delta(self):
        product = make_product()
        product.parameter_groups[1].parameters[0].price_modifier = -15.5
        assert PricingService.resolve_unit_price(product, {20: 201}) == 84.5

    def test_string_keys_are_normalized(self):
        product = make_product()
        assert PricingService.resolve_unit_price(product, {"10": "102", "20": "201"}) == 105.0

    def test_product_without_groups_costs_base_price(self):
        product = ProductDTO(id=2, base_price=19.99)
        assert PricingService.resolve_unit_price(product, None) == 19.99

    def test_rounds_to_cents(self):
        product = ProductDTO(id=3, base_price=0.1, parameter_groups=[
            ProductParameterGroupDTO(parameter_group_id=1, default_parameter_id=1, parameters=[
                ParameterDTO(id=1, parameter_group_id=1, price_modifier=0.2),
            ]),
        ])
        assert PricingService.resolve_unit_price(product, {}) == 0.3


class TestResolveSelectionErrors:

    def test_missing_group_without_default_fails(self):
        product = make_product()
        with pytest.raises(IncompleteSelectionException) as exc_info:
            PricingService.resolve_unit_price(product, {10: 102})
        assert exc_info.value.parameter_group_id == 20

    def test_parameter_from_other_group_fails(self):
        product = make_product()
        with pytest.raises(InvalidParameterException) as exc_info:
            PricingService.resolve_unit_price(product, {10: 201, 20: 201})
        assert exc_info.value.parameter_group_id == 10
        assert exc_info.value.parameter_id == 201

    def test_group_not_attached_fails(self):
        product = make_product()
        with pytest.raises(InvalidParameterException) as exc_info:
            PricingService.resolve_unit_price(product, {20: 201, 99: 101})
        assert "not attached" in exc_info.value.reason

    def test_default_pointing_at_removed_parameter_fails(self):
        product = make_product()
        product.parameter_groups[0].default_parameter_id = 999
        with pytest.raises(InvalidParameterException):
            PricingService.resolve_unit_price(product, {20: 201})

    def test_resolve_selection_completes_defaults(self):
        product = make_product()
        assert PricingService.resolve_selection(product, {20: 202}) == {10: 101, 20: 202}


class TestResolverWithLoadedProducts:

    @pytest.mark.asyncio
    async def test_end_to_end_example_price(self, session, catalogue):
        product = await ProductRepository.get_by_id_with_parameters(catalogue.enclosure_id, session)
        assert PricingService.resolve_unit_price(product, {catalogue.color_id: catalogue.blue_id}) == 105.0
        assert PricingService.resolve_unit_price(product, {}) == 100.0
