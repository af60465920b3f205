"""
Unit Tests: SpecialService (bundle pricing)

Covers:
- calculate_original_price() / calculate_original_prices() (batch equals singles)
- check_availability()
- discount_percent()
- list_available_specials() / get_pricing()
"""

from unittest.mock import patch

import pytest

from enums.special_status import SpecialStatus
from exceptions.product import ProductNotFoundException
from exceptions.special import SpecialNotFoundException
from models.parameter import ParameterDTO
from models.product import ProductDTO, ProductParameterGroupDTO
from models.special import SpecialDTO, SpecialItemDTO
from services.special import SpecialService


def make_products() -> dict[int, ProductDTO]:
    return {
        1: ProductDTO(id=1, name="Enclosure", base_price=100.0, parameter_groups=[
            ProductParameterGroupDTO(parameter_group_id=10, default_parameter_id=101, parameters=[
                ParameterDTO(id=101, parameter_group_id=10, price_modifier=0.0),
                ParameterDTO(id=102, parameter_group_id=10, price_modifier=5.0),
            ]),
        ]),
        2: ProductDTO(id=2, name="Lid", base_price=20.0, parameter_groups=[
            ProductParameterGroupDTO(parameter_group_id=20, default_parameter_id=None, parameters=[
                ParameterDTO(id=201, parameter_group_id=20, price_modifier=0.0),
                ParameterDTO(id=202, parameter_group_id=20, price_modifier=3.5),
            ]),
        ]),
        3: ProductDTO(id=3, name="Retired", base_price=50.0, is_enabled=False),
    }


def make_special(special_id: int, items: list[tuple[int, int, dict]], price: float = 100.0,
                 status: SpecialStatus = SpecialStatus.AVAILABLE) -> SpecialDTO:
    return SpecialDTO(
        id=special_id,
        name=f"Special {special_id}",
        price=price,
        status=status,
        items=[
            SpecialItemDTO(product_id=product_id, quantity=quantity, selected_parameters=selection)
            for product_id, quantity, selection in items
        ],
    )


class TestOriginalPrice:

    def test_single_special(self):
        special = make_special(1, [(1, 2, {10: 102}), (2, 1, {20: 202})])
        assert SpecialService.calculate_original_price(special, make_products()) == 233.5

    def test_defaults_apply_to_items(self):
        special = make_special(1, [(1, 3, {})])
        assert SpecialService.calculate_original_price(special, make_products()) == 300.0

    @pytest.mark.parametrize("count", [0, 1, 2, 5])
    def test_batch_equals_sum_of_singles(self, count):
        products = make_products()
        specials = [
            make_special(index + 1, [(1, index + 1, {10: 101 + index % 2}), (2, 1, {20: 201 + index % 2})])
            for index in range(count)
        ]

        batch = SpecialService.calculate_original_prices(specials, products)

        assert len(batch) == count
        for special in specials:
            assert batch[special.id] == SpecialService.calculate_original_price(special, products)

    def test_batch_never_fetches(self):
        products = make_products()
        specials = [make_special(1, [(1, 1, {})]), make_special(2, [(2, 2, {20: 201})])]
        with patch('services.special.ProductRepository.get_by_ids_with_parameters') as mock_fetch:
            SpecialService.calculate_original_prices(specials, products)
        mock_fetch.assert_not_called()

    def test_empty_special_costs_nothing(self):
        assert SpecialService.calculate_original_price(make_special(1, []), make_products()) == 0.0

    def test_missing_constituent_is_not_priced(self):
        special = make_special(1, [(1, 1, {}), (999, 1, {})])
        with pytest.raises(ProductNotFoundException) as exc_info:
            SpecialService.calculate_original_prices([special], make_products())
        assert exc_info.value.product_id == 999


class TestAvailability:

    def test_available(self):
        special = make_special(1, [(1, 1, {10: 102})])
        availability = SpecialService.check_availability(special, make_products())
        assert availability.is_available
        assert availability.reasons == []

    def test_disabled_constituent(self):
        special = make_special(1, [(1, 1, {}), (3, 1, {})])
        availability = SpecialService.check_availability(special, make_products())
        assert not availability.is_available
        assert availability.reasons == ["product 3 is disabled"]

    def test_missing_constituent(self):
        special = make_special(1, [(42, 1, {})])
        availability = SpecialService.check_availability(special, make_products())
        assert availability.reasons == ["product 42 no longer exists"]

    def test_removed_parameter(self):
        special = make_special(1, [(2, 1, {20: 299})])
        availability = SpecialService.check_availability(special, make_products())
        assert not availability.is_available
        assert "Invalid parameter 299" in availability.reasons[0]

    def test_draft_status(self):
        special = make_special(1, [(1, 1, {})], status=SpecialStatus.DRAFT)
        availability = SpecialService.check_availability(special, make_products())
        assert availability.reasons == ["special is draft"]


class TestDiscountPercent:

    @pytest.mark.parametrize("price, original, expected", [
        (200.0, 233.5, 14),
        (50.0, 100.0, 50),
        (100.0, 100.0, 0),
        (120.0, 100.0, 0),
        (10.0, 0.0, 0),
    ])
    def test_discount(self, price, original, expected):
        assert SpecialService.discount_percent(price, original) == expected

    def test_unavailable_special_is_not_priced(self):
        products = make_products()
        pricing = SpecialService.build_pricing([make_special(1, [(3, 1, {})], price=40.0)], products)
        assert pricing[0].is_available is False
        assert pricing[0].original_price is None
        assert pricing[0].discount_percent is None


class TestSpecialQueries:

    @pytest.mark.asyncio
    async def test_list_available_specials(self, session, catalogue):
        pricing = await SpecialService.list_available_specials(session)

        assert [entry.special_id for entry in pricing] == [catalogue.bundle_id]
        assert pricing[0].price == 200.0
        assert pricing[0].original_price == 233.5
        assert pricing[0].discount_percent == 14

    @pytest.mark.asyncio
    async def test_get_pricing_of_draft(self, session, catalogue):
        pricing = await SpecialService.get_pricing(catalogue.draft_id, session)
        assert pricing.is_available is False
        assert pricing.reasons == ["special is draft"]

    @pytest.mark.asyncio
    async def test_get_pricing_unknown(self, session, catalogue):
        with pytest.raises(SpecialNotFoundException):
            await SpecialService.get_pricing(9999, session)
