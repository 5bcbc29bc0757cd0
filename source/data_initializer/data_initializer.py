"""Script to initialize the database, load CSV data, and insert records into the storefront schema."""

import os
import uuid
from decimal import Decimal

import pandas as pd
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import DATA_DIR, DB_URL
from storefront.database import create_storefront_engine
from storefront.logger import Logger
from storefront.models import Category, Customer, Order, OrderDetail, Product
from storefront.passwords import hash_password
from storefront.tools import setup_database, wait_for_postgres

# Set up logger
logger = Logger.get_logger(__name__)

CSV_FILES = {
    "categories": "categories.csv",
    "products": "products.csv",
    "customers": "customers.csv",
    "orders": "orders.csv",
    "order_details": "order_details.csv",
}

# Tables seeded with explicit integer keys
SERIAL_KEYS = (
    ("category", "category_id"),
    ("product", "product_id"),
)


def _optional(value):
    """Map pandas' missing markers to None."""
    return None if pd.isna(value) else value


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


class DataInitializer:
    """
    Class to initialize database, load CSV data, and insert records.

    Rows whose key already exists are skipped, so the initializer can be
    re-run against a populated database.
    """

    def __init__(self, db_url: str, data_dir: str):
        self.db_url = db_url
        self.data_dir = data_dir
        self.csv_paths = {
            name: os.path.join(self.data_dir, file_name)
            for name, file_name in CSV_FILES.items()
        }

    def load_csv_data(self, file_path: str) -> pd.DataFrame:
        """Load data from a CSV file"""
        try:
            return pd.read_csv(file_path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logger.error(f"Error loading CSV file {file_path}: {e}")
            return pd.DataFrame()

    def insert_categories(self, session: Session, categories_df: pd.DataFrame) -> int:
        """Insert category data into the database"""
        inserted_categories = 0
        for _, row in categories_df.iterrows():
            category_id = int(row["category_id"])
            if session.get(Category, category_id) is None:
                session.add(
                    Category(
                        category_id=category_id,
                        category_name=row["category_name"],
                    )
                )
                inserted_categories += 1

        session.commit()
        logger.info(f"Inserted {inserted_categories} categories")
        return inserted_categories

    def insert_products(self, session: Session, products_df: pd.DataFrame) -> int:
        """Insert product data into the database"""
        inserted_products = 0
        for _, row in products_df.iterrows():
            product_id = int(row["product_id"])
            if session.get(Product, product_id) is None:
                session.add(
                    Product(
                        product_id=product_id,
                        category_id=int(row["category_id"]),
                        name=row["name"],
                        description=_optional(row["description"]),
                        price=_money(row["price"]),
                        stock_quantity=int(row["stock_quantity"]),
                        sold_by=_optional(row["sold_by"]),
                    )
                )
                inserted_products += 1

        session.commit()
        logger.info(f"Inserted {inserted_products} products")
        return inserted_products

    def sync_sequences(self, session: Session) -> None:
        """
        Move the PostgreSQL key sequences past the seeded ids.

        SQLite derives the next rowid from the table itself and needs nothing.
        """
        if session.get_bind().dialect.name != "postgresql":
            return

        for table, column in SERIAL_KEYS:
            session.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{table}', '{column}'), "
                    f"COALESCE((SELECT MAX({column}) FROM {table}), 0) + 1, false)"
                )
            )
        session.commit()
        logger.info("Synchronized key sequences")

    def insert_customers(self, session: Session, customers_df: pd.DataFrame) -> int:
        """Insert customer data into the database, hashing the seed passwords"""
        inserted_customers = 0
        for _, row in customers_df.iterrows():
            customer_id = uuid.UUID(str(row["customer_id"]))
            if session.get(Customer, customer_id) is None:
                session.add(
                    Customer(
                        customer_id=customer_id,
                        first_name=row["first_name"],
                        last_name=row["last_name"],
                        email=row["email"],
                        password=hash_password(str(row["password"])),
                    )
                )
                inserted_customers += 1

        session.commit()
        logger.info(f"Inserted {inserted_customers} customers")
        return inserted_customers

    def insert_orders(self, session: Session, orders_df: pd.DataFrame) -> int:
        """Insert order data into the database"""
        inserted_orders = 0
        for _, row in orders_df.iterrows():
            order_id = uuid.UUID(str(row["order_id"]))
            if session.get(Order, order_id) is None:
                session.add(
                    Order(
                        order_id=order_id,
                        customer_id=uuid.UUID(str(row["customer_id"])),
                        order_date=pd.to_datetime(row["order_date"]).to_pydatetime(),
                        total_amount=_money(row["total_amount"]),
                    )
                )
                inserted_orders += 1

        session.commit()
        logger.info(f"Inserted {inserted_orders} orders")
        return inserted_orders

    def insert_order_details(
        self, session: Session, order_details_df: pd.DataFrame
    ) -> int:
        """
        Insert order lines; the customer is taken from the owning order.

        Each inserted line also produces an order_history row via the trigger.
        """
        inserted_details = 0
        for _, row in order_details_df.iterrows():
            order_detail_id = uuid.UUID(str(row["order_detail_id"]))
            if session.get(OrderDetail, order_detail_id) is not None:
                continue

            order = session.get(Order, uuid.UUID(str(row["order_id"])))
            if order is None:
                logger.warning(
                    f"Skipping order detail {order_detail_id}: unknown order {row['order_id']}"
                )
                continue

            session.add(
                OrderDetail(
                    order_detail_id=order_detail_id,
                    order_id=order.order_id,
                    product_id=int(row["product_id"]),
                    customer_id=order.customer_id,
                    quantity=int(row["quantity"]),
                    unit_price=_money(row["unit_price"]),
                )
            )
            inserted_details += 1

        session.commit()
        logger.info(f"Inserted {inserted_details} order details")
        return inserted_details

    def __call__(self) -> None:
        """Main function to initalize"""
        engine = create_storefront_engine(self.db_url)

        # Wait for the database to be available
        if not wait_for_postgres(engine, max_retries=20, delay=2):
            return

        # Set up database
        setup_database(engine=engine)

        with Session(engine) as session:
            try:
                frames = {
                    name: self.load_csv_data(path)
                    for name, path in self.csv_paths.items()
                }

                if any(frame.empty for frame in frames.values()):
                    logger.error("One or more CSV files could not be loaded. Exiting.")
                    return

                # Parents before children
                self.insert_categories(session, frames["categories"])
                self.insert_products(session, frames["products"])
                self.sync_sequences(session)
                self.insert_customers(session, frames["customers"])
                self.insert_orders(session, frames["orders"])
                self.insert_order_details(session, frames["order_details"])

                logger.info("Initialization completed successfully")

            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Database error: {e}")


if __name__ == "__main__":
    data_initializer = DataInitializer(db_url=DB_URL, data_dir=DATA_DIR)
    data_initializer()
