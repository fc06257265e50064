"""
Module: inventory_kernel.models.catalog
Responsibility: ORM persistence for the descriptive catalog a supply points
    at: category, type (classification), color, and unit of measure.
Architecture position: Kernel > Models.  May import from db/ and domain/values.py.

The kernel never writes these tables.  They exist so that supply reads can
join human-readable labels; catalog maintenance is owned elsewhere.
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import IDENTITY_KEY


class SupplyCategory(Base):
    """Top-level grouping of supply types (e.g. "Threads", "Fabrics")."""

    __tablename__ = "supply_category"

    id_supply_category: Mapped[int] = mapped_column(
        IDENTITY_KEY, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class SupplyType(Base):
    """Classification of a supply; belongs to one category."""

    __tablename__ = "supply_type"

    id_supply_type: Mapped[int] = mapped_column(
        IDENTITY_KEY, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    id_supply_category: Mapped[int | None] = mapped_column(
        ForeignKey("supply_category.id_supply_category"),
        nullable=True,
    )


class SupplyColor(Base):
    __tablename__ = "supply_color"

    id_supply_color: Mapped[int] = mapped_column(
        IDENTITY_KEY, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class UnitOfMeasure(Base):
    __tablename__ = "unit_of_measure"

    id_uom: Mapped[int] = mapped_column(
        IDENTITY_KEY, primary_key=True, autoincrement=True
    )
    description: Mapped[str] = mapped_column(String(100), nullable=False)
