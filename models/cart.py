# A cart belongs to exactly one owner: an authenticated user or a guest session.
# The owner is exposed as the tagged variant CartOwner so callers never have to
# interpret two nullable columns; the table keeps two columns guarded by a check
# constraint and one partial unique index per identity (one active cart each).
#
# Line prices are snapshots taken at add-time. Carts are re-validated against
# the catalogue only at checkout (services/order.py).
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, DateTime, func, CheckConstraint, Index, text

from enums.cart_status import CartStatus
from models.base import Base, enum_column


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=True)
    session_id = Column(String, nullable=True)
    status = Column(enum_column(CartStatus), nullable=False, default=CartStatus.ACTIVE)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint('(user_id IS NULL) <> (session_id IS NULL)', name='check_cart_single_owner'),
        Index('uq_carts_active_user', 'user_id', unique=True,
              sqlite_where=text("status = 'active'"), postgresql_where=text("status = 'active'")),
        Index('uq_carts_active_session', 'session_id', unique=True,
              sqlite_where=text("status = 'active'"), postgresql_where=text("status = 'active'")),
    )


class UserOwner(BaseModel):
    kind: Literal["user"] = "user"
    user_id: int


class GuestOwner(BaseModel):
    kind: Literal["guest"] = "guest"
    session_id: str


CartOwner = Annotated[UserOwner | GuestOwner, Field(discriminator="kind")]


class CartDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    session_id: str | None = None
    status: CartStatus | None = None
    created_at: datetime | None = None

    @property
    def owner(self) -> UserOwner | GuestOwner:
        if self.user_id is not None:
            return UserOwner(user_id=self.user_id)
        return GuestOwner(session_id=self.session_id)
