"""SQLAlchemy table models for the relational store."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class ProductRow(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(sa.Numeric(18, 4), nullable=False)
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, default="USD")
    available: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)


class InventoryRow(Base):
    """One stock row per product; quantity never drops below zero."""

    __tablename__ = "inventory"

    product_id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    location: Mapped[str] = mapped_column(sa.String(200), nullable=False, default="")

    __table_args__ = (
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )


class InventoryReleaseRow(Base):
    """Release keys already applied to the ledger."""

    __tablename__ = "inventory_releases"

    release_key: Mapped[str] = mapped_column(sa.String(128), primary_key=True)
    product_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    released_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)


class OrderRow(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(sa.Numeric(18, 4), nullable=False)
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, default="USD")
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)

    items: Mapped[list[OrderItemRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRow.line_no",
        lazy="selectin",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    product_id: Mapped[str] = mapped_column(sa.String(64), nullable=False)
    product_name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(sa.Numeric(18, 4), nullable=False)
    currency: Mapped[str] = mapped_column(sa.String(3), nullable=False, default="USD")

    order: Mapped[OrderRow] = relationship(back_populates="items")

    __table_args__ = (
        sa.UniqueConstraint("order_id", "line_no", name="uq_order_items_order_line"),
        sa.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )
