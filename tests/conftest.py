"""
Test configuration and fixtures
"""

import os
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from data_initializer.data_initializer import DataInitializer
from storefront.database import create_storefront_engine
from storefront.models import Base, Category, Customer, Product

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

SEED_DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")

engine = create_storefront_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine)


@pytest.fixture(scope="function")
def db_engine():
    """Fresh schema, including triggers, for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a fresh database session for each test"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def category(db_session):
    category = Category(category_name="Electronics")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture
def product(db_session, category):
    product = Product(
        category=category,
        name="Wireless Headphones",
        description="Over-ear bluetooth headphones",
        price=Decimal("89.99"),
        stock_quantity=10,
        sold_by="Acme Audio",
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture
def customer(db_session):
    customer = Customer(
        first_name="Ada",
        last_name="Lovelace",
        email="ada.lovelace@example.com",
    )
    customer.set_password("analytical-engine")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture
def seed_data_dir():
    return SEED_DATA_DIR


@pytest.fixture
def seeded_session(db_session, seed_data_dir):
    """Session over the repository's seed CSV data"""
    initializer = DataInitializer(db_url=SQLALCHEMY_DATABASE_URL, data_dir=seed_data_dir)
    frames = {
        name: initializer.load_csv_data(path)
        for name, path in initializer.csv_paths.items()
    }
    initializer.insert_categories(db_session, frames["categories"])
    initializer.insert_products(db_session, frames["products"])
    initializer.sync_sequences(db_session)
    initializer.insert_customers(db_session, frames["customers"])
    initializer.insert_orders(db_session, frames["orders"])
    initializer.insert_order_details(db_session, frames["order_details"])
    return db_session
