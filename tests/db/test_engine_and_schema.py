"""Tests for the engine helpers and the table-level constraints."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from inventory_config import InventorySettings
from inventory_kernel.db import engine as engine_module
from inventory_kernel.db.engine import session_scope
from inventory_kernel.models.movement import SupplyMovement
from inventory_kernel.models.stock import SupplyStock
from inventory_kernel.models.supply import Supply


class TestSessionScope:

    def test_rolls_back_on_error(self, db_tables, session_factory):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                session.add(Supply(description="Never Saved", active=True))
                session.flush()
                raise RuntimeError("abort")

        with session_scope() as session:
            assert session.query(Supply).filter_by(description="Never Saved").count() == 0

    def test_commits_on_success(self, db_tables, session_factory):
        with session_scope() as session:
            session.add(Supply(description="Saved Once", active=True))

        with session_scope() as session:
            assert session.query(Supply).filter_by(description="Saved Once").count() == 1


class TestEngineInitialization:

    def test_uninitialized_engine_raises(self, monkeypatch):
        monkeypatch.setattr(engine_module, "_engine", None)
        monkeypatch.setattr(engine_module, "_SessionFactory", None)
        with pytest.raises(RuntimeError, match="not initialized"):
            engine_module.get_engine()
        with pytest.raises(RuntimeError, match="not initialized"):
            engine_module.get_session()

    def test_init_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.setattr(engine_module, "_engine", None)
        monkeypatch.setattr(engine_module, "_SessionFactory", None)
        settings = InventorySettings(database_url=f"sqlite:///{tmp_path / 'settings.db'}")

        eng = engine_module.init_engine_from_settings(settings)
        try:
            assert eng.dialect.name == "sqlite"
            assert engine_module.get_engine() is eng
        finally:
            eng.dispose()


def _movement(supply_id, quantity, movement_type):
    return insert(SupplyMovement).values(
        id_supply=supply_id,
        movement_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        quantity=quantity,
        movement_type=movement_type,
    )


class TestConstraints:
    """Database CHECK constraints back up the validators."""

    def test_zero_quantity_rejected(self, session, create_supply):
        supply = create_supply()
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.execute(_movement(supply.id_supply, Decimal("0"), "purchase"))

    def test_sign_must_match_kind(self, session, create_supply):
        supply = create_supply()
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.execute(_movement(supply.id_supply, Decimal("-1"), "purchase"))

    def test_unknown_kind_rejected(self, session, create_supply):
        supply = create_supply()
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.execute(_movement(supply.id_supply, Decimal("1"), "transfer"))

    def test_movement_requires_existing_supply(self, session):
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.execute(_movement(987_654, Decimal("1"), "purchase"))

    def test_stock_cannot_be_negative(self, session, create_supply):
        supply = create_supply()
        stock = session.get(SupplyStock, supply.id_supply)
        stock.stock_actual = Decimal("-1")
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()

    def test_blank_description_rejected(self, session):
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.execute(insert(Supply).values(description="   ", active=True))
