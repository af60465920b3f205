from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute
from models.parameter import Parameter, ParameterGroup, ParameterDTO
from models.product import Product, ProductParameterGroup, ProductDTO, ProductParameterGroupDTO


class ProductRepository:

    @staticmethod
    async def get_by_ids_with_parameters(
        product_ids: list[int] | set[int],
        session: Session | AsyncSession
    ) -> dict[int, ProductDTO]:
        """
        Batch load products with their attached parameter groups and parameters.

        Prevents N+1 queries: three queries in total regardless of how many
        products, groups or parameters are involved. This is the pre-fetch
        every batch pricing caller uses to build its product map.

        Args:
            product_ids: IDs of the products to load
            session: Database session

        Returns:
            Dict mapping product_id -> ProductDTO (missing IDs are simply absent)

        Example:
            >>> products = await ProductRepository.get_by_ids_with_parameters([1, 2], session)
            >>> products[1].parameter_groups[0].parameters[0].price_modifier  # 5.0
        """
        product_ids = set(product_ids)
        if not product_ids:
            return {}

        products_stmt = select(Product).where(Product.id.in_(product_ids))
        products = (await session_execute(products_stmt, session)).scalars().all()
        if not products:
            return {}

        attachments_stmt = (
            select(ProductParameterGroup, ParameterGroup.name)
            .join(ParameterGroup, ParameterGroup.id == ProductParameterGroup.parameter_group_id)
            .where(ProductParameterGroup.product_id.in_([product.id for product in products]))
            .order_by(ProductParameterGroup.display_order, ProductParameterGroup.id)
        )
        attachments = (await session_execute(attachments_stmt, session)).all()

        group_ids = {attachment.parameter_group_id for attachment, _ in attachments}
        parameters_by_group: dict[int, list[ParameterDTO]] = {}
        if group_ids:
            parameters_stmt = (
                select(Parameter)
                .where(Parameter.parameter_group_id.in_(group_ids))
                .order_by(Parameter.display_order, Parameter.id)
            )
            parameters = (await session_execute(parameters_stmt, session)).scalars().all()
            for parameter in parameters:
                parameters_by_group.setdefault(parameter.parameter_group_id, []).append(
                    ParameterDTO.model_validate(parameter, from_attributes=True)
                )

        groups_by_product: dict[int, list[ProductParameterGroupDTO]] = {}
        for attachment, group_name in attachments:
            groups_by_product.setdefault(attachment.product_id, []).append(
                ProductParameterGroupDTO(
                    parameter_group_id=attachment.parameter_group_id,
                    name=group_name,
                    default_parameter_id=attachment.default_parameter_id,
                    display_order=attachment.display_order,
                    parameters=parameters_by_group.get(attachment.parameter_group_id, []),
                )
            )

        return {
            product.id: ProductDTO(
                id=product.id,
                category_id=product.category_id,
                name=product.name,
                base_price=product.base_price,
                is_enabled=product.is_enabled,
                parameter_groups=groups_by_product.get(product.id, []),
            )
            for product in products
        }

    @staticmethod
    async def get_by_id_with_parameters(product_id: int, session: Session | AsyncSession) -> ProductDTO | None:
        products = await ProductRepository.get_by_ids_with_parameters([product_id], session)
        return products.get(product_id)

    @staticmethod
    async def set_enabled(product_id: int, is_enabled: bool, session: Session | AsyncSession) -> bool:
        stmt = update(Product).where(Product.id == product_id).values(is_enabled=is_enabled)
        result = await session_execute(stmt, session)
        return result.rowcount > 0


class ParameterRepository:

    @staticmethod
    async def get_by_id(parameter_id: int, session: Session | AsyncSession) -> ParameterDTO | None:
        stmt = select(Parameter).where(Parameter.id == parameter_id)
        parameter = (await session_execute(stmt, session)).scalar()
        if parameter is None:
            return None
        return ParameterDTO.model_validate(parameter, from_attributes=True)

    @staticmethod
    async def update_price_modifier(parameter_id: int, price_modifier: float,
                                    session: Session | AsyncSession) -> bool:
        stmt = update(Parameter).where(Parameter.id == parameter_id).values(price_modifier=price_modifier)
        result = await session_execute(stmt, session)
        return result.rowcount > 0
