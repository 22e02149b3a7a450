"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Point the application engine at SQLite before any app module is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["ENVIRONMENT"] = "test"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from shared.infrastructure.db import get_db
from rest_api.models import Base, InventoryItem, MenuItem, Recipe, Table


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    # Create all tables
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Seed fixtures
# =============================================================================


@pytest.fixture
def seed_tables(db_session):
    """Three free tables seating 2, 4 and 6."""
    tables = [
        Table(table_number=1, capacity=2),
        Table(table_number=2, capacity=4),
        Table(table_number=3, capacity=6),
    ]
    db_session.add_all(tables)
    db_session.commit()
    for table in tables:
        db_session.refresh(table)
    return tables


@pytest.fixture
def seed_inventory(db_session):
    """Ingredients: burger patties and buns, plus an unused bag of rice."""
    patties = InventoryItem(
        item_name="Beef patty",
        category="meat",
        quantity=Decimal("10"),
        unit="units",
        unit_cost=Decimal("1.50"),
        supplier="Carnes del Sur",
        min_stock_level=Decimal("4"),
        reorder_quantity=Decimal("20"),
    )
    buns = InventoryItem(
        item_name="Bun",
        category="bakery",
        quantity=Decimal("30"),
        unit="units",
        unit_cost=Decimal("0.25"),
        supplier="Forno Centrale",
        min_stock_level=Decimal("10"),
        reorder_quantity=Decimal("40"),
    )
    rice = InventoryItem(
        item_name="Rice",
        category="dry goods",
        quantity=Decimal("3"),
        unit="kg",
        unit_cost=Decimal("2.00"),
        supplier=None,
        min_stock_level=Decimal("5"),
        reorder_quantity=Decimal("0"),
    )
    db_session.add_all([patties, buns, rice])
    db_session.commit()
    return {"patty": patties, "bun": buns, "rice": rice}


@pytest.fixture
def seed_menu(db_session, seed_inventory):
    """
    A $5.00 burger made from recipe ingredients and a $3.50 lemonade
    counted by the glass (stock-tracked, no recipe).
    """
    burger = MenuItem(
        name="Burger",
        category="main",
        price=Decimal("5.00"),
        is_available=True,
        track_inventory=False,
    )
    lemonade = MenuItem(
        name="Lemonade",
        category="beverage",
        price=Decimal("3.50"),
        is_available=True,
        track_inventory=True,
        current_stock=20,
        low_stock_threshold=5,
    )
    db_session.add_all([burger, lemonade])
    db_session.flush()

    db_session.add_all([
        Recipe(
            menu_item_id=burger.id,
            inventory_item_id=seed_inventory["patty"].id,
            quantity_required=Decimal("1"),
        ),
        Recipe(
            menu_item_id=burger.id,
            inventory_item_id=seed_inventory["bun"].id,
            quantity_required=Decimal("1"),
        ),
    ])
    db_session.commit()
    return {"burger": burger, "lemonade": lemonade}


@pytest.fixture
def order_lines(seed_menu):
    """Two burgers and one lemonade: $13.50."""
    from shared.utils.schemas import OrderItemInput

    return [
        OrderItemInput(menu_item_id=seed_menu["burger"].id, quantity=2),
        OrderItemInput(menu_item_id=seed_menu["lemonade"].id, quantity=1),
    ]
